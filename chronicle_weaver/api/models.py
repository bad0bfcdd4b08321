"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel

from chronicle_weaver.models import Character


class StartBody(BaseModel):
    story: str = ""


class ActionBody(BaseModel):
    action: str


class ImageBody(BaseModel):
    image: str | None = None  # base64 data URL


class ConfirmCharacterBody(BaseModel):
    character: Character
    name: str = ""
