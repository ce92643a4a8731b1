"""Push channel — broadcast development notifications to connected browsers.

The dev server exposes one ``PushChannel`` at ``ServerConfig.events_path``
as a Server-Sent Events endpoint. Extensions receive the channel in
``init_push_channel()`` and publish whatever payloads they like; perch
itself only defines the ``reload`` event used by the live-reload client.

Thread safety:
    - SSEEvent is a frozen dataclass (immutable, safe to share)
    - PushChannel uses a Lock to protect the subscriber map
    - Each subscriber owns an asyncio.Queue bound to the loop it
      subscribed on; publishing from any other thread (a file watcher,
      a build step) hands the event to that loop with
      ``call_soon_threadsafe``
"""

import asyncio
import json as json_module
import logging
import threading
from collections.abc import AsyncIterator
from typing import Any

from perch.realtime.events import EventStream, SSEEvent

logger = logging.getLogger("perch.realtime")

RELOAD_EVENT = "reload"


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class PushChannel:
    """Async broadcast channel for push notifications.

    Each call to ``subscribe()`` returns an async iterator backed by its
    own ``asyncio.Queue``. ``publish()`` places the event into every active
    subscriber's queue; slow consumers whose queue is full miss the event
    rather than blocking the publisher. ``publish()`` and ``close()`` may be
    called from any thread.

    Usage in an extension::

        class Announce:
            def init_server(self, server, config): ...

            def init_push_channel(self, channel, config):
                channel.publish({"status": "ready"}, event="build")
    """

    __slots__ = ("_closed", "_heartbeat_interval", "_lock", "_max_queue", "_subscribers")

    def __init__(self, *, heartbeat_interval: float = 15.0, max_queue: int = 256) -> None:
        self._subscribers: dict[asyncio.Queue[SSEEvent | None], asyncio.AbstractEventLoop] = {}
        self._lock = threading.Lock()
        self._heartbeat_interval = heartbeat_interval
        self._max_queue = max_queue
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        """Number of currently connected subscribers."""
        with self._lock:
            return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(
        self,
        data: str | dict[str, Any],
        *,
        event: str | None = None,
        id: str | None = None,  # noqa: A002 — SSE field name
    ) -> int:
        """Broadcast a message to all active subscribers.

        Dicts are JSON-encoded. Returns the number of subscribers the
        message was handed to. From another thread the hand-off is
        scheduled on each subscriber's loop, and a full queue is only
        detected there (and logged).
        """
        payload = data if isinstance(data, str) else json_module.dumps(data, default=str)
        message = SSEEvent(data=payload, event=event, id=id)

        with self._lock:
            subscribers = list(self._subscribers.items())

        current = _running_loop()
        delivered = 0
        for queue, loop in subscribers:
            if loop is current:
                if self._deliver(queue, message):
                    delivered += 1
                continue
            try:
                loop.call_soon_threadsafe(self._deliver, queue, message)
            except RuntimeError:
                continue  # Subscriber's loop is already closed
            delivered += 1
        return delivered

    @staticmethod
    def _deliver(queue: "asyncio.Queue[SSEEvent | None]", message: SSEEvent) -> bool:
        """Put *message* on *queue*. Runs on the queue's own loop."""
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.debug("Dropping %s event for a slow subscriber", message.event or "message")
            return False
        return True

    @staticmethod
    def _stop(queue: "asyncio.Queue[SSEEvent | None]") -> None:
        """Put the stop signal on *queue*. Runs on the queue's own loop."""
        # A full queue drops its oldest event to make room for the stop signal.
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(None)

    async def subscribe(self) -> AsyncIterator[SSEEvent]:
        """Subscribe to published events.

        The subscription is removed when the iterator exits (client
        disconnect or ``close()``).
        """
        queue: asyncio.Queue[SSEEvent | None] = asyncio.Queue(maxsize=self._max_queue)
        with self._lock:
            if self._closed:
                return
            self._subscribers[queue] = asyncio.get_running_loop()
        try:
            while True:
                message = await queue.get()
                if message is None:
                    break
                yield message
        finally:
            with self._lock:
                self._subscribers.pop(queue, None)

    def stream(self) -> EventStream:
        """A fresh ``EventStream`` for one SSE connection."""
        return EventStream(self.subscribe(), heartbeat_interval=self._heartbeat_interval)

    def close(self) -> None:
        """Signal all subscribers to stop and refuse new ones.

        Puts ``None`` into every queue, which makes the async iterators
        finish cleanly.
        """
        with self._lock:
            self._closed = True
            subscribers = list(self._subscribers.items())
            self._subscribers.clear()

        current = _running_loop()
        for queue, loop in subscribers:
            if loop is current:
                self._stop(queue)
                continue
            try:
                loop.call_soon_threadsafe(self._stop, queue)
            except RuntimeError:
                continue  # Subscriber's loop is already closed
