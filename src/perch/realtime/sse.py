"""Server-Sent Events over ASGI.

Each connection is an ``SSEConnection``. It writes the stream headers,
pumps events from the stream's iterator, writes a heartbeat comment
whenever the iterator stays idle for ``heartbeat_interval`` seconds, and
stops as soon as the client sends ``http.disconnect``.
"""

import asyncio
import contextlib
import json as json_module
from typing import Any

from perch._internal.asgi import Receive, Send
from perch.realtime.events import EventStream, SSEEvent

HEARTBEAT = b": heartbeat\n\n"

STREAM_HEADERS = [
    (b"content-type", b"text/event-stream"),
    (b"cache-control", b"no-cache"),
    (b"connection", b"keep-alive"),
    (b"x-accel-buffering", b"no"),
    (b"access-control-allow-origin", b"*"),
]


class ClientGone(Exception):
    """The client closed the response while events were still being written."""


async def _next_value(iterator: Any) -> Any:
    return await anext(iterator)


def format_event(value: Any, *, default_event: str | None = None) -> str:
    """Wire format for a value yielded by an event stream."""
    if isinstance(value, SSEEvent):
        return value.encode()
    if isinstance(value, dict):
        data = json_module.dumps(value, default=str)
    else:
        data = str(value)
    return SSEEvent(data=data, event=default_event).encode()


class SSEConnection:
    """One open ``text/event-stream`` response."""

    __slots__ = ("_debug", "_receive", "_send", "_stream")

    def __init__(self, stream: EventStream, send: Send, receive: Receive, *, debug: bool = False) -> None:
        self._stream = stream
        self._send = send
        self._receive = receive
        self._debug = debug

    async def serve(self) -> None:
        """Stream until the iterator ends or the client disconnects."""
        await self._send({"type": "http.response.start", "status": 200, "headers": STREAM_HEADERS})

        pump = asyncio.create_task(self._pump())
        watch = asyncio.create_task(self._wait_for_disconnect())
        try:
            await asyncio.wait({pump, watch}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pump.cancel()
            watch.cancel()
            await asyncio.gather(pump, watch, return_exceptions=True)
            await self._send({"type": "http.response.body", "body": b"", "more_body": False})

    async def _wait_for_disconnect(self) -> None:
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                return

    async def _pump(self) -> None:
        iterator = aiter(self._stream.generator)
        # asyncio.wait leaves the pending task running on timeout, so one
        # anext() survives any number of heartbeats.
        pending: asyncio.Task[Any] | None = None
        try:
            while True:
                if pending is None:
                    pending = asyncio.create_task(_next_value(iterator))
                done, _ = await asyncio.wait({pending}, timeout=self._stream.heartbeat_interval)
                if not done:
                    await self._write(HEARTBEAT)
                    continue

                finished, pending = pending, None
                try:
                    value = finished.result()
                except StopAsyncIteration:
                    return
                frame = format_event(value, default_event=self._stream.event_type)
                await self._write(frame.encode("utf-8"))
        except ClientGone:
            return
        except Exception as exc:
            await self._report(exc)
        finally:
            if pending is not None:
                pending.cancel()
                with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration):
                    await pending

    async def _write(self, chunk: bytes) -> None:
        try:
            await self._send({"type": "http.response.body", "body": chunk, "more_body": True})
        except RuntimeError as exc:
            raise ClientGone from exc

    async def _report(self, exc: Exception) -> None:
        from perch.server.terminal_errors import log_error

        log_error(exc)
        detail = f"{type(exc).__name__}: {exc}" if self._debug else "Internal server error"
        with contextlib.suppress(ClientGone):
            await self._write(SSEEvent(data=detail, event="error").encode().encode("utf-8"))


async def handle_sse(
    event_stream: EventStream,
    send: Send,
    receive: Receive,
    *,
    debug: bool = False,
) -> None:
    """Serve *event_stream* on an ASGI HTTP connection."""
    await SSEConnection(event_stream, send, receive, debug=debug).serve()
