"""Write a ``Response`` to an ASGI connection."""

from perch._internal.asgi import Send
from perch.http.response import Response

# 1xx, 204 and 304 responses never carry a message body.
_NO_BODY_STATUSES = frozenset({204, 304})


def _encode_headers(response: Response, content_length: int) -> list[tuple[bytes, bytes]]:
    pairs = [("content-type", response.content_type), *response.headers]
    pairs.append(("content-length", str(content_length)))
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* as one start message and one body message.

    A ``HEAD`` request gets the ``Content-Length`` of the equivalent
    ``GET`` with an empty body.
    """
    status = response.status
    body = b"" if status < 200 or status in _NO_BODY_STATUSES else response.body_bytes

    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": _encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": b"" if method == "HEAD" else body})
