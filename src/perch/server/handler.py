"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw HTTP ASGI directly. Converts the
scope to a typed Request, dispatches through middleware to the push
channel endpoint or the path resolver, and sends the Response back
through ASGI send().
"""

import mimetypes
from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.compilers import CompileContext, Compiled
from perch.errors import Forbidden, HTTPError, MethodNotAllowed, NotFound
from perch.http.request import Request
from perch.http.response import Response, SSEResponse
from perch.middleware.protocol import AnyResponse, Next
from perch.realtime.channel import PushChannel
from perch.routing.resolver import (
    CompiledHit,
    Decision,
    Denied,
    FallbackHit,
    FileHit,
    PathResolver,
)
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response

ALLOWED_METHODS = frozenset({"GET", "HEAD"})

_FALLBACK_CONTENT_TYPE = "text/html; charset=utf-8"
_DEFAULT_CONTENT_TYPE = "application/octet-stream"


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    resolver: PathResolver,
    middleware: tuple[Callable[..., Any], ...],
    channel: PushChannel,
    events_path: str,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    try:

        async def dispatch(req: Request) -> AnyResponse:
            if req.method not in ALLOWED_METHODS:
                raise MethodNotAllowed(ALLOWED_METHODS)
            if req.path == events_path:
                return SSEResponse(channel.stream())
            return await respond(resolver.resolve(req.url), req)

        # Wrap middleware around the dispatch
        handler = dispatch
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> AnyResponse:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = handle_http_error(exc, request, debug=debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    if isinstance(response, SSEResponse):
        from perch.realtime.sse import handle_sse

        await handle_sse(response.event_stream, send, receive, debug=debug)
    else:
        await send_response(response, send, method=request.method)


async def respond(decision: Decision, request: Request) -> Response:
    """Turn a resolver decision into a Response.

    Raises:
        Forbidden: The mapped path escaped its directory.
        NotFound: Nothing matched and there is no fallback document.
    """
    match decision:
        case CompiledHit(entry=entry, path=path, source=source):
            context = CompileContext(request_path=request.url, path=path)
            result = await invoke(entry.compile, source, context)
            if isinstance(result, Compiled):
                return Response(body=result.body, content_type=result.content_type)
            return result
        case FileHit(path=path, body=body):
            return Response(body=body, content_type=guess_content_type(path))
        case FallbackHit(body=body):
            return Response(body=body, content_type=_FALLBACK_CONTENT_TYPE)
        case Denied():
            raise Forbidden()
        case _:
            raise NotFound()


def guess_content_type(path: Any) -> str:
    """Best-effort content type from a file name."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or _DEFAULT_CONTENT_TYPE
