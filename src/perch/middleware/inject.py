"""Snippet injection for HTML responses.

Used for the live-reload client: every ``text/html`` response gets the
``<script>`` placed right before ``</body>``.
"""

from dataclasses import replace

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import AnyResponse, Next


def inject_snippet(html: str, snippet: str, *, before: str, full_page_only: bool) -> str | None:
    """Return *html* with *snippet* inserted, or ``None`` to leave it alone.

    The snippet goes in front of the first *before* marker. Without a
    marker it is appended, unless *full_page_only* is set. Documents that
    already contain the snippet are left alone.
    """
    if snippet in html:
        return None
    head, marker, tail = html.partition(before)
    if marker:
        return head + snippet + marker + tail
    return None if full_page_only else html + snippet


class HTMLInject:
    """Middleware that injects *snippet* into ``text/html`` responses.

    Anything else, including the SSE endpoint, passes through untouched::

        server.add_middleware(HTMLInject('<script src="/reload.js"></script>'))
    """

    __slots__ = ("_before", "_full_page_only", "_snippet")

    def __init__(self, snippet: str, *, before: str = "</body>", full_page_only: bool = False) -> None:
        self._snippet = snippet
        self._before = before
        self._full_page_only = full_page_only

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = await next(request)
        if not isinstance(response, Response) or "text/html" not in response.content_type:
            return response

        body = response.body
        if isinstance(body, str):
            html = body
        else:
            try:
                html = body.decode("utf-8")
            except UnicodeDecodeError:
                return response  # Not UTF-8; pass the bytes through untouched
        injected = inject_snippet(
            html,
            self._snippet,
            before=self._before,
            full_page_only=self._full_page_only,
        )
        if injected is None:
            return response
        return replace(response, body=injected)
