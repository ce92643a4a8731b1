"""perch development server application.

Mutable during setup (middleware, extensions). Frozen at runtime when
``run()``, lifespan startup, or the first ``__call__()`` happens: the
route table, compiler table, resolver, and middleware chain are built
once and never change afterwards.
"""

import logging
import threading
from collections.abc import Iterable

from perch._internal.asgi import Receive, Scope, Send
from perch.compilers import CompilerTable
from perch.config import ServerConfig
from perch.extensions import ServerExtension
from perch.middleware.favicon import Favicon
from perch.middleware.protocol import Middleware
from perch.realtime.channel import RELOAD_EVENT, PushChannel
from perch.routing.resolver import PathResolver
from perch.routing.table import RouteTable, build_route_table
from perch.server.handler import handle_request

logger = logging.getLogger("perch.server")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class DevServer:
    """A development web server for single-page applications.

    Serves files from ``config.base_dir``, maps each visible subdirectory
    (plus ``config.map`` overrides) to a URL prefix, compiles matching
    sources on read, and answers unmatched paths with the index document.
    A push channel for live-update notifications is exposed at
    ``config.events_path``.

    Usage::

        server = DevServer(ServerConfig(base_dir="./app", live_reload=True))
        server.run()

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock and a
        double check so exactly one thread builds the runtime state.
    """

    __slots__ = (
        "_channel",
        "_config",
        "_extensions",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_resolver",
    )

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        extensions: Iterable[ServerExtension] = (),
    ) -> None:
        self._config: ServerConfig = config or ServerConfig()
        self._extensions: list[ServerExtension] = list(extensions)
        self._middleware_list: list[Middleware] = []
        self._channel = PushChannel(heartbeat_interval=self._config.heartbeat_interval)
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Compiled state — set during _freeze()
        self._resolver: PathResolver | None = None
        self._middleware: tuple[Middleware, ...] = ()

    # -- Setup --

    @property
    def config(self) -> ServerConfig:
        """The configuration; fully resolved once the server is frozen."""
        return self._config

    @property
    def channel(self) -> PushChannel:
        """The push channel served at ``config.events_path``."""
        return self._channel

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline (outermost first)."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def add_extension(self, extension: ServerExtension) -> None:
        """Register an extension whose init hooks run at freeze time."""
        self._check_not_frozen()
        self._extensions.append(extension)

    # -- Runtime state --

    @property
    def resolver(self) -> PathResolver:
        # Set early in _freeze(), so extension hooks can read it.
        if self._resolver is None:
            self._ensure_frozen()
        assert self._resolver is not None
        return self._resolver

    @property
    def routes(self) -> RouteTable:
        """The frozen route table, in evaluation order."""
        return self.resolver.routes

    def notify_reload(self) -> int:
        """Tell connected live-reload clients to reload the page.

        Returns the number of clients notified.
        """
        return self._channel.publish("reload", event=RELOAD_EVENT)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the server, load TLS material, and start serving.

        Blocks until the server is stopped. When the host program has not
        configured logging, a console handler at ``config.log_level`` is
        installed so the listening line and request errors are visible.

        Raises:
            ConfigurationError: If the configuration cannot be resolved.
            StartupConfigError: If TLS is requested and the key or
                certificate cannot be read.
        """
        from perch.server.dev import run_dev_server
        from perch.server.tls import load_tls_material

        self._ensure_frozen()

        tls = load_tls_material(self._config)
        _host = host or self._config.host
        _port = port or self._config.port
        protocol = "https" if tls else "http"

        if not logging.getLogger().hasHandlers():
            logging.basicConfig(
                level=self._config.log_level.upper(),
                format=LOG_FORMAT,
                datefmt="%H:%M:%S",
            )

        logger.info("Listening on %s://%s:%d", protocol, _host, _port)

        run_dev_server(self, _host, _port, reload=self._config.reload, tls=tls)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._resolver is not None

        await handle_request(
            scope,
            receive,
            send,
            resolver=self._resolver,
            middleware=self._middleware,
            channel=self._channel,
            events_path=self._config.events_path,
            debug=self._config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes at startup so configuration errors surface before the
        first request. Closes the push channel at shutdown so SSE
        subscribers disconnect cleanly.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                self._channel.close()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Resolve configuration (absolute base_dir, favicon, index)
        config = self._config.resolved()
        self._config = config

        # 2. Route table and compilers
        routes = build_route_table(config.base_dir, config.map, exclude=config.exclude)
        compilers = CompilerTable(config.compilers)
        self._resolver = PathResolver(
            base_dir=config.base_dir,
            routes=routes,
            compilers=compilers,
            index=config.index_path,
            root=config.root,
            push_state=config.push_state,
        )
        logger.debug("Route table: %r", routes)

        # 3. Extension hooks, before listening begins. init_server may
        #    still register middleware.
        for extension in self._extensions:
            extension.init_server(self, config)
        for extension in self._extensions:
            extension.init_push_channel(self._channel, config)

        # 4. Capture middleware as an immutable tuple: favicon first, then
        #    user middleware, then live-reload injection (innermost, so it
        #    sees the final HTML body).
        middleware_list: list[Middleware] = [Favicon(config.favicon_path)]
        middleware_list.extend(self._middleware_list)
        if config.live_reload:
            from perch.middleware.inject import HTMLInject
            from perch.realtime.client import render_live_reload_snippet

            middleware_list.append(HTMLInject(render_live_reload_snippet(config.events_path)))
        self._middleware = tuple(middleware_list)

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the server after it has started serving requests. "
                "Register middleware and extensions before calling run()."
            )
            raise RuntimeError(msg)
