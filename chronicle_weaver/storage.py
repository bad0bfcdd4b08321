"""Save-slot persistence.

The session's durable subset is written as one JSON document under a single
fixed key of a string key-value store:

    {
      "originalStory": "...",
      "history": [{"role": "narrator", "text": "..."}, ...],
      "currentScene": {"id": ..., "description": ..., "imagePrompt": ...,
                       "image": ..., "choices": [...], "isEnding": false},
      "character": {"name": ..., "appearanceDescription": ..., "strength": ...,
                    ..., "portraitImage": ...} | null
    }

There is no version field; a document of the wrong shape is only detected
when validation fails on load (CorruptDataError). ``status`` is not saved;
a loaded session always comes back as "playing".

Stores:

    MemoryStore  dict-backed, optional capacity limit
    FileStore    one file per key under a base directory, replaced atomically
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from chronicle_weaver.history import HistoryLog
from chronicle_weaver.models import SaveRecord
from chronicle_weaver.state import SessionState

logger = logging.getLogger(__name__)

SAVE_KEY = "chronicleWeaverSaveGame"


class StorageError(RuntimeError):
    """The store could not read or write the save slot."""


class CorruptDataError(StorageError):
    """The save slot holds something that is not a valid save record."""


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------

class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store. ``capacity`` caps the total stored characters."""

    def __init__(self, capacity: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._capacity = capacity

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._capacity is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self._capacity:
                raise StorageError(f"Store capacity of {self._capacity} characters exceeded")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStore:
    """Each key is a file under ``base_path``.

    Writes go to a temp file in the same directory and are moved into place
    with os.replace, so a reader never sees a half-written slot.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]+", "-", key).strip("-.") or "slot"
        return self._base / f"{safe}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self._base, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class PersistenceGateway:
    def __init__(self, store: KeyValueStore, key: str = SAVE_KEY) -> None:
        self._store = store
        self._key = key

    def save(self, state: SessionState) -> None:
        """Overwrite the slot with the durable subset of ``state``."""
        if state.current_scene is None:
            raise ValueError("Cannot save a session without a current scene")
        record = SaveRecord(
            original_story=state.original_story,
            history=list(state.history.snapshot()),
            current_scene=state.current_scene,
            character=state.character,
        )
        payload = record.model_dump_json(by_alias=True)
        try:
            self._store.set(self._key, payload)
        except OSError as e:
            raise StorageError(f"Could not write save slot: {e}") from e
        logger.debug("saved session key=%s bytes=%d entries=%d", self._key, len(payload), len(state.history))

    def load(self) -> SessionState | None:
        """Rebuild a session from the slot, or None if nothing is saved.

        The caller is expected to clear() the slot on CorruptDataError.
        """
        try:
            raw = self._store.get(self._key)
        except UnicodeDecodeError as e:
            raise CorruptDataError(f"Save data is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Could not read save slot: {e}") from e
        if raw is None:
            return None

        try:
            record = SaveRecord.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptDataError(f"Save data is corrupted: {e.error_count()} validation error(s)") from e

        return SessionState(
            original_story=record.original_story,
            history=HistoryLog.from_entries(record.history),
            current_scene=record.current_scene,
            character=record.character,
            status="playing",
        )

    def clear(self) -> None:
        try:
            self._store.remove(self._key)
        except OSError as e:
            raise StorageError(f"Could not clear save slot: {e}") from e

    def exists(self) -> bool:
        try:
            return self._store.get(self._key) is not None
        except UnicodeDecodeError:
            # Occupied, though load() will report it as corrupt.
            return True
        except OSError:
            return False
