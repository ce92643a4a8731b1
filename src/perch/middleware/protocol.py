"""The middleware shape.

A middleware wraps the rest of the pipeline::

    async def no_store(request: Request, next: Next) -> AnyResponse:
        response = await next(request)
        return response.with_header("Cache-Control", "no-store")

Functions and callable objects both qualify; there is no base class.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from perch.http.request import Request
from perch.http.response import Response, SSEResponse

type AnyResponse = Response | SSEResponse

type Next = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
