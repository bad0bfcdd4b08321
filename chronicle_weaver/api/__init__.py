"""FastAPI endpoints under /api.

Endpoint groups: session (start, action, save, load, reset, state) and
character (begin, generate, name, confirm, cancel). Every mutating endpoint
returns {"ok", "kind", "message", "session"}; the HTTP status follows the
outcome kind (409 refused, 404 not found, 402 quota, 502 provider error,
422 corrupt save, 507 storage error).
"""

from fastapi import APIRouter

from .characters import router as characters_router
from .session import router as session_router

router = APIRouter()
router.include_router(session_router)
router.include_router(characters_router)
