"""Response types.

``Response`` carries a fully read body; perch never streams files.
``SSEResponse`` marks the push channel endpoint, which the handler serves
through the SSE loop instead of the plain sender.
"""

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response. Middleware derives new ones with ``with_*()``::

        response.with_header("Cache-Control", "no-store")
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Response":
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Copy with one more header appended."""
        return replace(self, headers=self.headers + ((name, value),))

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        return next(
            (value for key, value in self.headers if key.lower() == name.lower()),
            default,
        )

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body


@dataclass(frozen=True, slots=True)
class SSEResponse:
    """The push channel endpoint's response.

    Status and headers are fixed by the SSE loop, so the ``with_*()``
    methods return the response unchanged and middleware written for
    ``Response`` keeps working.
    """

    event_stream: Any  # perch.realtime.events.EventStream

    def with_status(self, status: int) -> "SSEResponse":  # noqa: ARG002
        return self

    def with_header(self, name: str, value: str) -> "SSEResponse":  # noqa: ARG002
        return self
