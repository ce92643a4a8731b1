"""Error handling pipeline for perch requests.

Maps HTTPError exceptions and unexpected failures to plain-text
responses. A failed resolution looks exactly like a legitimate miss to
the client; the terminal log carries the detail.
"""

import logging

from perch.errors import CompileError, HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.server.terminal_errors import log_error

logger = logging.getLogger("perch.server")

_TEXT = "text/plain; charset=utf-8"


def handle_http_error(exc: HTTPError, request: Request, *, debug: bool) -> Response:
    """Map an HTTPError to a Response."""
    if isinstance(exc, CompileError):
        logger.error("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    else:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if isinstance(exc, CompileError) and not debug:
        detail = "Internal Server Error"

    response = Response(body=detail, status=exc.status, content_type=_TEXT)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    log_error(exc, request)

    body = f"Internal Server Error\n\n{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=body, status=500, content_type=_TEXT)
