"""Generation history tracking."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One past generate/edit result."""

    original_url: str
    edited_url: str
    prompt: str
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class GenerationHistory:
    """In-memory history, most recent entry first. Lives as long as the session."""

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []

    def record(self, original_url: str, edited_url: str, prompt: str) -> HistoryEntry:
        """Create an entry and insert it at the front."""
        entry = HistoryEntry(original_url=original_url, edited_url=edited_url, prompt=prompt)
        self._entries.insert(0, entry)
        return entry

    def list(self, limit: Optional[int] = None) -> List[HistoryEntry]:
        """Return the most recent records."""
        if limit is None:
            return list(self._entries)
        return self._entries[:limit]

    def get(self, entry_id: str) -> HistoryEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"History entry '{entry_id}' not found")

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
