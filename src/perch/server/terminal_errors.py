"""Terminal error formatting for the perch dev server.

Replaces raw ``logger.exception()`` with output that highlights the
useful part of a failure. Verbosity is controlled by the
``PERCH_TRACEBACK`` environment variable:

- ``compact`` (default): error summary plus application frames only
- ``full``: the complete Python traceback
- ``minimal``: a single line with the raising location
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.http.request import Request

logger = logging.getLogger("perch.server")

_MAX_FRAMES = 5


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from user code (not stdlib/site-packages/perch)."""
    if "site-packages" in filename or filename.startswith("<"):
        return False
    if os.sep + "perch" + os.sep in filename:
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def format_compact_traceback(exc: BaseException) -> str:
    """Error summary followed by at most five application frames.

    Falls back to the last three frames when none belong to the
    application (e.g. a failure inside a third-party compiler).
    """
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames if app_frames else frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-_MAX_FRAMES:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def log_error(exc: BaseException, request: Request | None = None) -> None:
    """Log an internal error at the configured verbosity.

    Args:
        exc: The exception that caused the 500 error.
        request: The request that triggered it (absent for SSE streams).
    """
    prefix = f"500 {request.method} {request.path}" if request is not None else "Server error"

    style = os.environ.get("PERCH_TRACEBACK", "compact").lower()
    if style == "full":
        logger.error(prefix, exc_info=exc)
    elif style == "minimal":
        logger.error("%s: %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))
