"""Transient, auto-dismissing notifications."""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_TTL_SECONDS = 3.0


@dataclass
class Notification:
    id: int
    message: str
    level: str
    expires_at: float


class NotificationCenter:
    """Holds notifications until their time-to-live runs out."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: list[Notification] = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, message: str, level: str = "error") -> Notification:
        self._prune()
        notification = Notification(
            id=next(self._ids),
            message=message,
            level=level,
            expires_at=self._clock() + self.ttl_seconds,
        )
        self._items.append(notification)
        return notification

    def active(self) -> list[Notification]:
        """Drop expired notifications and return the rest, oldest first."""
        self._prune()
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def _prune(self) -> None:
        now = self._clock()
        self._items = [n for n in self._items if n.expires_at > now]
