"""Startup extension points.

Extensions get the live server and push channel before the first request
is served. ``init_server`` may register middleware; ``init_push_channel``
typically stores the channel so it can publish later (e.g. from a file
watcher or a build step)::

    class BuildNotifier:
        def init_server(self, server, config):
            server.add_middleware(no_store)

        def init_push_channel(self, channel, config):
            self.channel = channel

    DevServer(config, extensions=[BuildNotifier()])

For one-off hooks, ``Hooks`` adapts two plain callables.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from perch.app import DevServer
    from perch.config import ServerConfig
    from perch.realtime.channel import PushChannel


@runtime_checkable
class ServerExtension(Protocol):
    """Protocol for startup extensions. No base class required."""

    def init_server(self, server: DevServer, config: ServerConfig) -> None: ...

    def init_push_channel(self, channel: PushChannel, config: ServerConfig) -> None: ...


@dataclass(frozen=True, slots=True)
class Hooks:
    """Adapt plain callables to the ``ServerExtension`` protocol.

    Either hook may be omitted.
    """

    web_init: Callable[[DevServer, ServerConfig], Any] | None = None
    web_socket_init: Callable[[PushChannel, ServerConfig], Any] | None = None

    def init_server(self, server: DevServer, config: ServerConfig) -> None:
        if self.web_init is not None:
            self.web_init(server, config)

    def init_push_channel(self, channel: PushChannel, config: ServerConfig) -> None:
        if self.web_socket_init is not None:
            self.web_socket_init(channel, config)
