"""Favicon middleware.

Answers ``GET /favicon.ico`` with a configured file so browsers stop
hitting the fallback document for their icon request. Falls through to
the next handler when the file does not exist.
"""

from pathlib import Path

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import AnyResponse, Next


class Favicon:
    """Serve a single icon file at a fixed URL.

    The file is read from disk on every request, like every other asset
    perch serves.

    Usage::

        server.add_middleware(Favicon("./public/favicon.ico"))
    """

    __slots__ = ("_path", "_url")

    def __init__(self, path: str | Path, *, url: str = "/favicon.ico") -> None:
        self._path = Path(path)
        self._url = url

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        if request.method not in ("GET", "HEAD") or request.path != self._url:
            return await next(request)

        try:
            body = self._path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return await next(request)

        return Response(body=body, content_type="image/x-icon")
