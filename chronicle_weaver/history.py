"""Append-only history log.

The ordered sequence of narrator/user entries is the conversational context
replayed to the provider on every turn. Entries are appended in chronological
order and never removed or reordered; the whole log is only ever replaced
wholesale, when a saved session is loaded.

Alternation (narrator, user, narrator, ...) is a convention upheld by the
session, not something append() checks.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from chronicle_weaver.models import HistoryEntry, Role


class HistoryLog:
    def __init__(self, entries: Iterable[HistoryEntry] = ()) -> None:
        self._entries: list[HistoryEntry] = list(entries)

    @classmethod
    def from_entries(cls, entries: Iterable[HistoryEntry | dict]) -> HistoryLog:
        return cls(
            e if isinstance(e, HistoryEntry) else HistoryEntry.model_validate(e)
            for e in entries
        )

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def record(self, role: Role, text: str) -> HistoryEntry:
        entry = HistoryEntry(role=role, text=text)
        self.append(entry)
        return entry

    def snapshot(self) -> tuple[HistoryEntry, ...]:
        """The full ordered sequence, read-only."""
        return tuple(self._entries)

    def copy(self) -> HistoryLog:
        return HistoryLog(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HistoryLog):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"HistoryLog({len(self._entries)} entries)"
