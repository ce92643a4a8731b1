"""perch — a development web server for single-page applications.

Serves static assets, maps URL prefixes to directories, compiles sources
on read, falls back to the index document for client-side routes, and
pushes live-update notifications over Server-Sent Events.

Basic usage::

    from perch import DevServer, ServerConfig

    server = DevServer(ServerConfig(base_dir="./app", live_reload=True))
    server.run()

SCSS compilation (``pip install perch[sass]``) is registered by default
for ``.scss`` requests.
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "CompileContext",
    "CompileError",
    "Compiled",
    "CompilerTable",
    "ConfigurationError",
    "DevServer",
    "Forbidden",
    "HTTPError",
    "Hooks",
    "Middleware",
    "Next",
    "NotFound",
    "PathResolver",
    "PerchError",
    "PushChannel",
    "Request",
    "Response",
    "RouteTable",
    "SSEEvent",
    "ServerConfig",
    "ServerExtension",
    "StartupConfigError",
    "TLSMaterial",
    "build_route_table",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "DevServer":
        from perch.app import DevServer

        return DevServer

    if name in ("ServerConfig", "TLSMaterial"):
        from perch import config as _config

        return getattr(_config, name)

    if name in ("Request", "Response"):
        from perch import http as _http

        return getattr(_http, name)

    if name in ("CompileContext", "Compiled", "CompilerTable"):
        from perch import compilers as _compilers

        return getattr(_compilers, name)

    if name in ("PathResolver", "RouteTable", "build_route_table"):
        from perch import routing as _routing

        return getattr(_routing, name)

    if name in ("PushChannel", "SSEEvent"):
        from perch import realtime as _realtime

        return getattr(_realtime, name)

    if name in ("AnyResponse", "Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("Hooks", "ServerExtension"):
        from perch import extensions as _ext

        return getattr(_ext, name)

    if name in (
        "CompileError",
        "ConfigurationError",
        "Forbidden",
        "HTTPError",
        "NotFound",
        "PerchError",
        "StartupConfigError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
