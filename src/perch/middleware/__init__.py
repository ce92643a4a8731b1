"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> AnyResponse

Built-in middleware:
    Favicon -- Serve the configured icon at /favicon.ico
    HTMLInject -- Inject snippets (live-reload client) into HTML responses
"""

from perch.middleware.favicon import Favicon
from perch.middleware.inject import HTMLInject
from perch.middleware.protocol import AnyResponse, Middleware, Next

__all__ = [
    "AnyResponse",
    "Favicon",
    "HTMLInject",
    "Middleware",
    "Next",
]
