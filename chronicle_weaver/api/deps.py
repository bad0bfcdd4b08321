"""Shared route helpers: session lookup and Outcome → HTTP response mapping."""

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from chronicle_weaver.models import InlineImage
from chronicle_weaver.session import Outcome, Session

STATUS_CODES = {
    "ok": 200,
    "refused": 409,
    "not_found": 404,
    "quota": 402,
    "provider_error": 502,
    "corrupt": 422,
    "storage_error": 507,
}


def get_session(request: Request) -> Session:
    return request.app.state.session


def respond(session: Session, outcome: Outcome, **extra) -> JSONResponse:
    body = {
        "ok": outcome.ok,
        "kind": outcome.kind,
        "message": outcome.message,
        "session": session.state.view(),
        **extra,
    }
    return JSONResponse(body, status_code=STATUS_CODES[outcome.kind])


def parse_image(data_url: str | None) -> InlineImage | None:
    if not data_url:
        return None
    try:
        return InlineImage.from_data_url(data_url)
    except ValueError:
        raise HTTPException(422, "Please upload an image file.")
