"""Ordered item buffer shared by the queuers.

Each entry keeps its item, the time it was added and, for the async queuer,
the completion handed back to the caller. Keeping the three together means
removing an item from either end can never mismatch its timestamp.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from datetime import datetime, timedelta
from typing import Any, NamedTuple

from pacekit.enums import QueuePosition

from .schemas import PriorityFn


class QueueEntry(NamedTuple):
    """A buffered item."""

    item: Any
    added_at: datetime
    future: asyncio.Future[Any] | None = None


class ItemBuffer:
    """List of entries with positional, priority-ordered and expiring access."""

    def __init__(self) -> None:
        self._entries: list[QueueEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QueueEntry]:
        return iter(self._entries)

    @property
    def items(self) -> tuple[Any, ...]:
        return tuple(entry.item for entry in self._entries)

    @property
    def timestamps(self) -> tuple[datetime, ...]:
        return tuple(entry.added_at for entry in self._entries)

    def insert(
        self,
        entry: QueueEntry,
        position: QueuePosition,
        get_priority: PriorityFn | None = None,
    ) -> None:
        """Insert an entry at one end, or by priority when a priority function is set.

        Equal priorities keep insertion order.
        """
        if get_priority is not None:
            priority = get_priority(entry.item)
            index = len(self._entries)
            for i, queued in enumerate(self._entries):
                if get_priority(queued.item) > priority:
                    index = i
                    break
            self._entries.insert(index, entry)
        elif position == QueuePosition.FRONT:
            self._entries.insert(0, entry)
        else:
            self._entries.append(entry)

    def take(self, position: QueuePosition) -> QueueEntry | None:
        """Remove and return the entry at one end."""
        if not self._entries:
            return None
        return self._entries.pop(0 if position == QueuePosition.FRONT else -1)

    def expire(self, now: datetime, duration: timedelta | None) -> list[QueueEntry]:
        """Remove and return every entry older than ``duration``."""
        if duration is None:
            return []
        expired = [e for e in self._entries if now - e.added_at > duration]
        if expired:
            self._entries = [e for e in self._entries if now - e.added_at <= duration]
        return expired

    def drain(self) -> list[QueueEntry]:
        """Remove and return all entries."""
        entries, self._entries = self._entries, []
        return entries
