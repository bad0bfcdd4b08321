"""Session state machine.

Owns the single SessionState of a running session and drives it through:

    idle ──begin_character_creation──▶ character_creation
    character_creation ──confirm / cancel──▶ idle
    idle ──start──▶ starting ──ok──▶ playing
                             └─fail─▶ idle
    playing ──submit_action──▶ loading_next ──ok / error──▶ playing
                                            └─quota──────▶ idle
    any stable status ──load──▶ playing      ──reset──▶ idle

At most one turn is in flight: start, submit_action, load and reset are
refused while the status is "starting" or "loading_next". State is only
mutated after the provider call returns, so a failed turn leaves history and
current scene exactly as they were.

Every intent returns an Outcome. Provider and storage failures never escape
this module; they become a status transition plus a user-facing message.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel

from chronicle_weaver.characters import (
    character_from_image,
    finalize_character,
    random_character,
    random_name,
)
from chronicle_weaver.history import HistoryLog
from chronicle_weaver.models import Character, InlineImage, Scene, Status
from chronicle_weaver.orchestrator import generate_story, produce_scene
from chronicle_weaver.prompts import OPENING_CUE
from chronicle_weaver.provider import ContentProvider, ProviderError, ProviderQuotaError
from chronicle_weaver.state import SessionState
from chronicle_weaver.storage import CorruptDataError, PersistenceGateway, StorageError

logger = logging.getLogger(__name__)

OutcomeKind = Literal[
    "ok",
    "refused",
    "provider_error",
    "quota",
    "not_found",
    "corrupt",
    "storage_error",
]

BUSY_STATUSES: frozenset[Status] = frozenset({"starting", "loading_next"})

MSG_BUSY = "The story is still being written. Please wait for the current turn to finish."
MSG_NOT_IDLE = "Reset the current adventure before starting a new one."
MSG_IN_CREATOR = "Finish or cancel character creation before starting the adventure."
MSG_START_FAILED = "The loom of destiny snapped. Please check your connection and try again."
MSG_TURN_FAILED = "A tear in the narrative fabric occurred. Let's try that action again."
MSG_QUOTA = (
    "The content provider refused the request. "
    "Check your API key and billing settings, then start again."
)
MSG_CHARACTER_FAILED = "Failed to generate character. Please try again."
MSG_NAME_FAILED = "Failed to generate a random name. Please try again."
MSG_NO_SCENE = "No game in progress to save!"
MSG_SAVED = "Game Saved Successfully!"
MSG_SAVE_FAILED = "Failed to save game. Please try again."
MSG_LOADED = "Game Loaded Successfully!"
MSG_NO_SAVE = "No saved game found to load."
MSG_CORRUPT = "Failed to load game. Save data might be corrupted, so it has been cleared."
MSG_LOAD_FAILED = "Failed to load game. Please try again."


class Outcome(BaseModel):
    ok: bool
    kind: OutcomeKind = "ok"
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> Outcome:
        return cls(ok=True, kind="ok", message=message)

    @classmethod
    def failure(cls, kind: OutcomeKind, message: str) -> Outcome:
        return cls(ok=False, kind=kind, message=message)


class Session:
    def __init__(
        self,
        provider: ContentProvider,
        gateway: PersistenceGateway,
        state: SessionState | None = None,
    ) -> None:
        self._provider = provider
        self._gateway = gateway
        self._state = state or SessionState()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> Status:
        return self._state.status

    @property
    def current_scene(self) -> Scene | None:
        return self._state.current_scene

    @property
    def character(self) -> Character | None:
        return self._state.character

    @property
    def busy(self) -> bool:
        return self._state.status in BUSY_STATUSES

    def has_saved_game(self) -> bool:
        return self._gateway.exists()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _transition(self, status: Status) -> None:
        if status != self._state.status:
            logger.info("session %s -> %s", self._state.status, status)
            self._state.status = status

    def _refuse(self, message: str) -> Outcome:
        logger.info("refused intent in status=%s: %s", self._state.status, message)
        return Outcome.failure("refused", message)

    def _quota(self, error: ProviderQuotaError) -> Outcome:
        logger.warning("provider quota/authorization failure: %s", error)
        self._transition("idle")
        return Outcome.failure("quota", MSG_QUOTA)

    # ------------------------------------------------------------------
    # Character creation
    # ------------------------------------------------------------------

    def begin_character_creation(self) -> Outcome:
        if self._state.status != "idle":
            return self._refuse("Characters can only be created before the adventure starts.")
        self._transition("character_creation")
        return Outcome.success()

    async def generate_character(
        self, image: InlineImage | None = None
    ) -> tuple[Outcome, Character | None]:
        """Draft a character from an image, or a fully random one. Not attached yet."""
        if self._state.status != "character_creation":
            return self._refuse("Open the character creator first."), None
        try:
            if image is not None:
                character = await character_from_image(self._provider, image)
            else:
                character = await random_character(self._provider)
        except ProviderQuotaError as e:
            return self._quota(e), None
        except ProviderError:
            logger.exception("character generation failed")
            return Outcome.failure("provider_error", MSG_CHARACTER_FAILED), None
        return Outcome.success(), character

    async def suggest_name(self, image: InlineImage | None = None) -> tuple[Outcome, str | None]:
        if self._state.status != "character_creation":
            return self._refuse("Open the character creator first."), None
        try:
            name = await random_name(self._provider, image)
        except ProviderQuotaError as e:
            return self._quota(e), None
        except ProviderError:
            logger.exception("name generation failed")
            return Outcome.failure("provider_error", MSG_NAME_FAILED), None
        return Outcome.success(), name

    def confirm_character(self, character: Character, entered_name: str = "") -> Outcome:
        if self._state.status != "character_creation":
            return self._refuse("Open the character creator first.")
        self._state.character = finalize_character(character, entered_name)
        self._transition("idle")
        return Outcome.success()

    def cancel_character_creation(self) -> Outcome:
        if self._state.status != "character_creation":
            return self._refuse("The character creator is not open.")
        self._transition("idle")
        return Outcome.success()

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def start(self, story_seed: str = "") -> Outcome:
        """Generate the opening scene. A blank seed gets a provider-written story."""
        if self.busy:
            return self._refuse(MSG_BUSY)
        if self._state.status == "character_creation":
            return self._refuse(MSG_IN_CREATOR)
        if self._state.status != "idle":
            return self._refuse(MSG_NOT_IDLE)

        self._transition("starting")
        try:
            story = story_seed if story_seed.strip() else await generate_story(self._provider)
            character = self._state.character or await random_character(self._provider)
            scene = await produce_scene(
                self._provider,
                original_story=story,
                history=(),
                action=OPENING_CUE,
                character=character,
            )
        except ProviderQuotaError as e:
            return self._quota(e)
        except ProviderError:
            logger.exception("failed to start session")
            self._transition("idle")
            return Outcome.failure("provider_error", MSG_START_FAILED)
        except Exception:
            self._transition("idle")
            raise

        history = HistoryLog()
        history.record("narrator", scene.description)

        self._state.original_story = story
        self._state.character = character
        self._state.current_scene = scene
        self._state.history = history
        self._transition("playing")
        return Outcome.success()

    async def submit_action(self, action: str) -> Outcome:
        """Play one turn: the selected choice or free text."""
        if self.busy:
            return self._refuse(MSG_BUSY)
        scene = self._state.current_scene
        if self._state.status != "playing" or scene is None:
            return self._refuse("There is no adventure in progress.")
        if scene.is_ending:
            return self._refuse("This tale has reached its end. Start a new adventure to play on.")
        if not action.strip():
            return self._refuse("Describe what you want to do.")

        self._transition("loading_next")
        try:
            next_scene = await produce_scene(
                self._provider,
                original_story=self._state.original_story,
                history=self._state.history.snapshot(),
                action=action,
                character=self._state.character,
            )
        except ProviderQuotaError as e:
            return self._quota(e)
        except ProviderError:
            logger.exception("failed to produce next scene")
            self._transition("playing")
            return Outcome.failure("provider_error", MSG_TURN_FAILED)
        except Exception:
            self._transition("playing")
            raise

        self._state.history.record("user", action)
        self._state.history.record("narrator", next_scene.description)
        self._state.current_scene = next_scene
        self._transition("playing")
        return Outcome.success()

    def reset(self) -> Outcome:
        if self.busy:
            return self._refuse(MSG_BUSY)
        self._state = SessionState()
        logger.info("session reset")
        return Outcome.success()

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------

    def save(self) -> Outcome:
        if self._state.current_scene is None:
            return self._refuse(MSG_NO_SCENE)
        try:
            self._gateway.save(self._state)
        except StorageError:
            logger.exception("failed to save session")
            return Outcome.failure("storage_error", MSG_SAVE_FAILED)
        return Outcome.success(MSG_SAVED)

    def load(self) -> Outcome:
        if self.busy:
            return self._refuse(MSG_BUSY)
        try:
            loaded = self._gateway.load()
        except CorruptDataError as e:
            logger.warning("clearing corrupted save slot: %s", e)
            try:
                self._gateway.clear()
            except StorageError:
                logger.exception("failed to clear corrupted save slot")
            return Outcome.failure("corrupt", MSG_CORRUPT)
        except StorageError:
            logger.exception("failed to load session")
            return Outcome.failure("storage_error", MSG_LOAD_FAILED)

        if loaded is None:
            return Outcome.failure("not_found", MSG_NO_SAVE)

        self._state = loaded
        logger.info("session loaded: %d history entries", len(loaded.history))
        return Outcome.success(MSG_LOADED)
