"""Server-Sent Event values."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class SSEEvent:
    """One event as it appears on the wire.

    ``data`` may span lines; each line becomes its own ``data:`` field.
    """

    data: str
    event: str | None = None
    id: str | None = None
    retry: int | None = None

    def encode(self) -> str:
        fields = (("event", self.event), ("id", self.id), ("retry", self.retry))
        head = "".join(f"{name}: {value}\n" for name, value in fields if value not in (None, ""))
        body = "".join(f"data: {line}\n" for line in self.data.split("\n"))
        return f"{head}{body}\n"


@dataclass(frozen=True, slots=True)
class EventStream:
    """An async iterator of events plus how to frame it.

    Yielded ``SSEEvent`` values are sent as-is. Anything else becomes the
    data of an event named *event_type* (dicts as JSON).
    """

    generator: AsyncIterator[Any]
    event_type: str | None = None
    heartbeat_interval: float = 15.0
