from fastapi import FastAPI

from chronicle_weaver.api import router
from chronicle_weaver.config import Settings, load_settings, make_provider
from chronicle_weaver.provider import ContentProvider
from chronicle_weaver.session import Session
from chronicle_weaver.storage import FileStore, KeyValueStore, PersistenceGateway


def create_app(
    settings: Settings | None = None,
    provider: ContentProvider | None = None,
    store: KeyValueStore | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    provider = provider or make_provider(settings)
    store = store or FileStore(settings.data_dir)

    app = FastAPI(title="Chronicle Weaver")
    app.state.settings = settings
    app.state.session = Session(provider, PersistenceGateway(store))
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses env / .env settings)
app = create_app()
