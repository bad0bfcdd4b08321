"""Character creator endpoints."""

from fastapi import APIRouter, Depends

from chronicle_weaver.session import Session

from .deps import get_session, parse_image, respond
from .models import ConfirmCharacterBody, ImageBody

router = APIRouter()


@router.post("/character/begin")
async def begin(session: Session = Depends(get_session)):
    """Open the character creator."""
    return respond(session, session.begin_character_creation())


@router.post("/character/generate")
async def generate(body: ImageBody, session: Session = Depends(get_session)):
    """Draft a character from an uploaded image, or a random one without it."""
    outcome, character = await session.generate_character(parse_image(body.image))
    draft = character.model_dump(by_alias=True) if character else None
    return respond(session, outcome, character=draft)


@router.post("/character/name")
async def suggest_name(body: ImageBody, session: Session = Depends(get_session)):
    """Suggest a name, inspired by the image when one is given."""
    outcome, name = await session.suggest_name(parse_image(body.image))
    return respond(session, outcome, name=name)


@router.post("/character/confirm")
async def confirm(body: ConfirmCharacterBody, session: Session = Depends(get_session)):
    """Attach the character; a non-blank name overrides the generated one."""
    return respond(session, session.confirm_character(body.character, body.name))


@router.post("/character/cancel")
async def cancel(session: Session = Depends(get_session)):
    """Close the character creator without changes."""
    return respond(session, session.cancel_character_creation())
