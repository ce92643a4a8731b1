"""Request and response types."""

from perch.http.headers import Headers
from perch.http.request import Request
from perch.http.response import Response, SSEResponse

__all__ = ["Headers", "Request", "Response", "SSEResponse"]
