import pytest

from chronicle_weaver.session import Session
from chronicle_weaver.storage import MemoryStore, PersistenceGateway
from tests.helpers import StubProvider


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def gateway(store: MemoryStore) -> PersistenceGateway:
    return PersistenceGateway(store)


@pytest.fixture
def session(provider: StubProvider, gateway: PersistenceGateway) -> Session:
    """A fresh idle session backed by the stub provider and an in-memory slot."""
    return Session(provider, gateway)
