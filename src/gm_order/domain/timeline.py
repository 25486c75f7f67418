"""Append-only order timeline.

``Timeline`` is immutable: ``append`` returns a new instance. Timestamps are
non-decreasing; an entry stamped earlier than its predecessor (clock skew
between app servers) is moved up to the predecessor's timestamp.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimelineEntry:
    status: str
    timestamp: datetime
    description: str
    actor_id: str | None = None


class Timeline:
    __slots__ = ("_entries",)

    def __init__(self, entries: tuple[TimelineEntry, ...] | list[TimelineEntry] = ()) -> None:
        entries = tuple(entries)
        for prev, cur in zip(entries, entries[1:]):
            if cur.timestamp < prev.timestamp:
                raise ValueError("timeline timestamps must be non-decreasing")
        self._entries = entries

    def append(
        self, status: str, at: datetime, description: str, actor_id: str | None = None
    ) -> "Timeline":
        if self._entries and at < self._entries[-1].timestamp:
            at = self._entries[-1].timestamp
        entry = TimelineEntry(status=status, timestamp=at, description=description, actor_id=actor_id)
        return Timeline(self._entries + (entry,))

    @property
    def entries(self) -> tuple[TimelineEntry, ...]:
        return self._entries

    @property
    def last(self) -> TimelineEntry | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TimelineEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> TimelineEntry:
        return self._entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Timeline):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Timeline({list(self._entries)!r})"
