"""Live update channel.

Subscribes to the task backend's server-sent event stream. The stream only
says "check again": an ``update`` event schedules a snapshot refresh, every
other event is logged and ignored. When the connection fails or ends the
channel closes it, waits a fixed delay and reconnects, forever.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import httpx

from taskgraph.errors import ChannelError

logger = logging.getLogger(__name__)

UPDATE_EVENT = "update"
DEFAULT_RECONNECT_DELAY = 5.0


class ChannelState(str, Enum):
    """Connection state of the live update channel."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


@dataclass
class ServerSentEvent:
    """One dispatched event of a text/event-stream."""

    event: str = "message"
    data: str = ""
    id: str | None = None


async def iter_events(lines: AsyncIterator[str]) -> AsyncIterator[ServerSentEvent]:
    """Parse text/event-stream lines into events.

    Events are dispatched on a blank line. Comment lines (leading colon) and
    unknown fields are skipped.
    """
    event_type = ""
    data: list[str] = []
    event_id: str | None = None

    async for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data or event_type:
                yield ServerSentEvent(event=event_type or "message", data="\n".join(data), id=event_id)
            event_type, data = "", []
            continue
        if line.startswith(":"):
            continue

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            event_type = value
        elif name == "data":
            data.append(value)
        elif name == "id":
            event_id = value


class LiveUpdateChannel:
    """Long-lived subscription that triggers a refresh on every update signal.

    Refreshes run as separate tasks so a slow fetch never stalls the stream.
    Overlapping refreshes are not serialized.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        stream_url: str,
        on_update: Callable[[], Awaitable[object]],
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._stream_url = stream_url
        self._on_update = on_update
        self.reconnect_delay = reconnect_delay
        self._sleep = sleep
        self.state = ChannelState.DISCONNECTED
        self.connect_attempts = 0
        self._closed = False
        self._run_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._run_task is not None and not self._run_task.done()

    def start(self) -> None:
        """Start the connect/reconnect loop in the background."""
        if self.is_running:
            return
        self._closed = False
        self._run_task = asyncio.create_task(self.run())

    async def run(self) -> None:
        """Connect, listen, and reconnect after a fixed delay until closed."""
        while not self._closed:
            try:
                await self._listen()
            except (httpx.HTTPError, ChannelError) as e:
                logger.error(f"Live update stream failed: {e}")
            except Exception as e:
                logger.exception(f"Error in live update stream: {e}")

            self.state = ChannelState.DISCONNECTED
            if self._closed:
                break
            logger.info(f"Reconnecting to live update stream in {self.reconnect_delay}s")
            await self._sleep(self.reconnect_delay)

    async def close(self) -> None:
        """Stop reconnecting, drop the connection and any refresh in flight."""
        self._closed = True
        if self._run_task:
            self._run_task.cancel()
            try:
                await self._run_task
            except asyncio.CancelledError:
                pass
            self._run_task = None
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        self.state = ChannelState.DISCONNECTED
        logger.info("Live update channel closed")

    async def _listen(self) -> None:
        self.state = ChannelState.CONNECTING
        self.connect_attempts += 1
        logger.info(f"Connecting to live update stream {self._stream_url}")

        async with self._client.stream(
            "GET",
            self._stream_url,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
            timeout=httpx.Timeout(10.0, read=None),
        ) as response:
            if response.status_code != 200:
                raise ChannelError(
                    f"Live update stream returned status {response.status_code}"
                )

            self.state = ChannelState.OPEN
            logger.info("Live update stream opened")

            async for event in iter_events(response.aiter_lines()):
                self._dispatch(event)

        raise ChannelError("Live update stream ended")

    def _dispatch(self, event: ServerSentEvent) -> None:
        if event.event != UPDATE_EVENT:
            logger.info(f"Ignoring '{event.event}' event from live update stream: {event.data}")
            return

        logger.info("Received 'update' event, refreshing tasks")
        task = asyncio.create_task(self._on_update())
        self._pending.add(task)
        task.add_done_callback(self._refresh_done)

    def _refresh_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Refresh after update event failed: {error!r}")
