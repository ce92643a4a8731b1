"""Push channel over Server-Sent Events."""

from perch.realtime.channel import RELOAD_EVENT, PushChannel
from perch.realtime.events import EventStream, SSEEvent

__all__ = ["RELOAD_EVENT", "EventStream", "PushChannel", "SSEEvent"]
