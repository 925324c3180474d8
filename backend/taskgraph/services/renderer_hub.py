"""Fan-out of frames to connected renderers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)

MAX_QUEUED_FRAMES = 512

Frame = dict[str, Any]


class RendererHub:
    """Keeps one bounded queue per connected renderer.

    A renderer that falls behind loses frames rather than stalling the
    session; it can resynchronize from the full scene endpoint.
    """

    def __init__(self, max_queued: int = MAX_QUEUED_FRAMES) -> None:
        self._max_queued = max_queued
        self._queues: set[asyncio.Queue[Frame | None]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    def subscribe(self) -> asyncio.Queue[Frame | None]:
        queue: asyncio.Queue[Frame | None] = asyncio.Queue(maxsize=self._max_queued)
        self._queues.add(queue)
        logger.info(f"Renderer connected (total renderers: {len(self._queues)})")
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Frame | None]) -> None:
        if queue in self._queues:
            self._queues.discard(queue)
            logger.info(f"Renderer disconnected (total renderers: {len(self._queues)})")

    def publish(self, event: str, data: Any) -> None:
        frame = {"event": event, "data": data}
        for queue in self._queues:
            try:
                queue.put_nowait(frame)
            except asyncio.QueueFull:
                logger.warning(f"Renderer queue full, dropping '{event}' frame")

    def close(self) -> None:
        """Signal every renderer stream to finish."""
        for queue in self._queues:
            try:
                queue.put_nowait(None)
            except asyncio.QueueFull:
                queue.get_nowait()
                queue.put_nowait(None)
        self._queues.clear()
