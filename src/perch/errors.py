"""perch exception hierarchy.

Shared across the resolver, the dev server, the handler, and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when server configuration is invalid.

    Also raised lazily when an optional dependency (e.g. ``libsass``) is
    needed but not installed.
    """


class StartupConfigError(ConfigurationError):
    """Raised when the server cannot start with the given configuration.

    The typical cause is TLS material that is missing or unreadable.
    Fatal: aborts startup before the listening socket opens.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the handler, middleware, or compilers. The ASGI handler
    catches these and turns them into plain-text responses.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no compiler, mapping, or fallback document matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Forbidden(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """403 — the resolved file lies outside its mapped directory."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — only ``GET`` and ``HEAD`` are served.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class CompileError(HTTPError):
    """500 — a compile-on-read function failed for the requested file.

    Compilers raise this with a readable message (e.g. the preprocessor's
    own error text). The request is answered with an error response and
    never retried.
    """

    def __init__(self, detail: str = "Compile failed") -> None:
        super().__init__(status=500, detail=detail)
