"""Transient user-facing notifications raised as a side channel of operations."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


class NotificationLevel(enum.Enum):
    success = "success"
    error = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Collects notifications until a caller drains them."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def success(self, message: str) -> None:
        self._pending.append(Notification(NotificationLevel.success, message))

    def error(self, message: str) -> None:
        self._pending.append(Notification(NotificationLevel.error, message))

    def peek(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        pending, self._pending = self._pending, []
        return pending


__all__ = ["Notification", "NotificationLevel", "Notifier"]
