"""Immutable HTTP request.

perch only serves ``GET`` and ``HEAD``, so a request is pure metadata:
no body access, no form parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from perch.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request built from an ASGI scope."""

    method: str
    path: str
    query_string: str
    headers: Headers
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    @property
    def url(self) -> str:
        """Request path including the query string, as the client sent it."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            query_string=scope.get("query_string", b"").decode("latin-1"),
            headers=Headers(scope.get("headers", ())),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
