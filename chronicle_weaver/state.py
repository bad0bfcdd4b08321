"""Session state aggregate.

One SessionState per running session. Only the Session state machine mutates
it; the persistence gateway reads and rebuilds the durable subset
(original_story, history, current_scene, character). ``status`` is never
persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from chronicle_weaver.history import HistoryLog
from chronicle_weaver.models import Character, Scene, Status


class SessionState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    original_story: str = ""
    history: HistoryLog = Field(default_factory=HistoryLog)
    current_scene: Scene | None = None
    character: Character | None = None
    status: Status = "idle"

    def view(self) -> dict:
        """Read-only projection for the presentation layer."""
        return {
            "status": self.status,
            "originalStory": self.original_story,
            "currentScene": (
                self.current_scene.model_dump(by_alias=True) if self.current_scene else None
            ),
            "character": self.character.model_dump(by_alias=True) if self.character else None,
            "history": [e.model_dump(by_alias=True) for e in self.history],
        }
