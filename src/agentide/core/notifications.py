"""Bounded notification log shown in the sidebar.

Producers (mode changes, focus changes, the action executor) only ever
append. The log is a ring buffer: once it holds ``capacity`` entries the
oldest one is dropped to make room. Renderers read an immutable snapshot.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

DEFAULT_CAPACITY = 10


class NotificationKind(str, Enum):
    """What produced a notification."""

    MOUSE_HOVER = "mouse_hover"
    MOUSE_CLICK = "mouse_click"
    FILE_OPERATION = "file_operation"
    INFO = "info"
    DEBUG = "debug"


@dataclass(frozen=True)
class NotificationEntry:
    """A single line in the notification log."""

    kind: NotificationKind
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def age_label(self, now: datetime | None = None) -> str:
        """Compact age string such as ``12s``, ``3m`` or ``2h``."""
        elapsed = int(((now or datetime.now()) - self.timestamp).total_seconds())
        elapsed = max(elapsed, 0)
        if elapsed < 60:
            return f"{elapsed}s"
        if elapsed < 3600:
            return f"{elapsed // 60}m"
        return f"{elapsed // 3600}h"


class NotificationSink:
    """Append-only ring buffer of notifications."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("notification capacity must be at least 1")
        self._entries: deque[NotificationEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, kind: NotificationKind, message: str) -> NotificationEntry:
        entry = NotificationEntry(kind=kind, message=message)
        self._entries.append(entry)
        return entry

    def info(self, message: str) -> NotificationEntry:
        return self.append(NotificationKind.INFO, message)

    def debug(self, message: str) -> NotificationEntry:
        return self.append(NotificationKind.DEBUG, message)

    def snapshot(self) -> tuple[NotificationEntry, ...]:
        """Oldest-first copy of the current entries."""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def count(self, kind: NotificationKind) -> int:
        return sum(1 for entry in self._entries if entry.kind == kind)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
