"""Session endpoints: start, play a turn, save, load, reset."""

from fastapi import APIRouter, Depends

from chronicle_weaver.session import Outcome, Session

from .deps import get_session, respond
from .models import ActionBody, StartBody

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/session")
async def get_state(session: Session = Depends(get_session)):
    """Current status, scene, character and history."""
    return {**session.state.view(), "hasSavedGame": session.has_saved_game()}


@router.post("/session/start")
async def start(body: StartBody, session: Session = Depends(get_session)):
    """Start an adventure from a story seed (blank for a generated story)."""
    return respond(session, await session.start(body.story))


@router.post("/session/action")
async def submit_action(body: ActionBody, session: Session = Depends(get_session)):
    """Play one turn with a suggested choice or free text."""
    return respond(session, await session.submit_action(body.action))


@router.post("/session/save")
async def save(session: Session = Depends(get_session)):
    """Write the session to the save slot."""
    return respond(session, session.save())


@router.post("/session/load")
async def load(session: Session = Depends(get_session)):
    """Replace the session with the saved one."""
    return respond(session, session.load())


@router.get("/session/saved")
async def has_saved_game(session: Session = Depends(get_session)):
    """Whether the save slot holds anything."""
    return {"hasSavedGame": session.has_saved_game()}


@router.post("/session/reset")
async def reset(session: Session = Depends(get_session)):
    """Drop the current adventure and return to idle."""
    outcome: Outcome = session.reset()
    return respond(session, outcome)
