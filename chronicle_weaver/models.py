"""Core domain models.

All session, orchestration and storage functions operate on these types.
Pydantic is used for validation and serialisation at every data boundary:
provider payloads are validated into SceneDraft / CharacterProfile before use,
and the save slot is validated into SaveRecord on load.

Python attributes are snake_case; the serialised form (API responses, the
save record) uses camelCase aliases, e.g. ``originalStory`` / ``isEnding``.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from chronicle_weaver.stats import STAT_MAX, STAT_MIN, STAT_ORDER, STAT_TOTAL

Role = Literal["user", "narrator"]

Status = Literal[
    "idle",
    "character_creation",
    "starting",
    "playing",
    "loading_next",
]

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.S)


class Record(BaseModel):
    """Base for everything that is serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InlineImage(Record):
    """Raw image bytes as returned by (or sent to) the provider, base64-encoded."""

    mime_type: str = "image/png"
    data: str

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @classmethod
    def from_data_url(cls, url: str) -> InlineImage:
        match = _DATA_URL_RE.match(url)
        if not match:
            raise ValueError("Not a base64 data URL")
        return cls(mime_type=match["mime"], data=match["data"])


class Character(Record):
    """The player character. Stats are bounded and always sum to STAT_TOTAL."""

    name: str
    appearance_description: str
    strength: int = Field(ge=STAT_MIN, le=STAT_MAX)
    dexterity: int = Field(ge=STAT_MIN, le=STAT_MAX)
    intelligence: int = Field(ge=STAT_MIN, le=STAT_MAX)
    charisma: int = Field(ge=STAT_MIN, le=STAT_MAX)
    portrait_image: str | None = None  # data URL or placeholder URL

    @model_validator(mode="after")
    def _check_budget(self) -> Character:
        total = sum(self.stats().values())
        if total != STAT_TOTAL:
            raise ValueError(f"stats must sum to {STAT_TOTAL}, got {total}")
        return self

    def stats(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in STAT_ORDER}


class Scene(Record):
    """One generated turn. Replaces the session's current scene; never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    image_prompt: str
    image: str | None = None
    choices: tuple[str, ...] = ()
    is_ending: bool = False


class HistoryEntry(Record):
    """A single entry in the session's append-only history."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str


# ---------------------------------------------------------------------------
# Provider requests and payloads
# ---------------------------------------------------------------------------

class ProviderTurn(BaseModel):
    """One conversational turn as the provider sees it."""

    role: Literal["user", "model"]
    text: str


class SceneRequest(BaseModel):
    system_instruction: str
    turns: list[ProviderTurn]


class SceneDraft(Record):
    """Structured scene response, as shaped by SCENE_SCHEMA."""

    scene_description: str
    image_prompt: str
    # 3-4 is requested through SCENE_SCHEMA, not enforced here.
    suggested_choices: list[str]
    is_ending: bool


class CharacterProfile(Record):
    """Structured character response. Stats are unbounded until normalised."""

    name: str
    appearance_description: str
    strength: int
    dexterity: int
    intelligence: int
    charisma: int

    def stats(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in STAT_ORDER}


# ---------------------------------------------------------------------------
# Durable subset
# ---------------------------------------------------------------------------

class SaveRecord(Record):
    """What the persistence gateway writes to the save slot. No version field."""

    original_story: str
    history: list[HistoryEntry]
    current_scene: Scene
    character: Character | None = None
