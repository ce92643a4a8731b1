"""Compile-on-read extension point.

A compiler turns the raw bytes of a source file into response content at
request time. Compilers are registered against a regular expression over
the request path (relative to the server root); the first pattern that
matches wins::

    def compile_upper(source: bytes, context: CompileContext) -> Compiled:
        return Compiled(source.upper(), "text/plain; charset=utf-8")

    config = ServerConfig(compilers=((r"\\.shout$", compile_upper),))

Compilers may be sync or async, and may return a ``Response`` to take
over the whole reply (status, headers) instead of a ``Compiled`` body.
"""

import re
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from perch.http.response import Response


@dataclass(frozen=True, slots=True)
class CompileContext:
    """What a compiler knows about the request it is compiling for.

    Attributes:
        request_path: The request path as received, query string included.
        path: The filesystem path the source bytes were read from.
    """

    request_path: str
    path: Path

    @property
    def directory(self) -> Path:
        """Directory of the source file (include path for ``@import``)."""
        return self.path.parent


@dataclass(frozen=True, slots=True)
class Compiled:
    """Produced response body plus the content type the compiler chose."""

    body: str | bytes
    content_type: str


type CompileResult = Compiled | Response
type Compiler = Callable[[bytes, CompileContext], CompileResult | Awaitable[CompileResult]]


@dataclass(frozen=True, slots=True)
class CompilerEntry:
    """A registered (pattern, compiler) pair."""

    pattern: re.Pattern[str]
    compile: Compiler

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


class CompilerTable:
    """Ordered, immutable set of compiler registrations.

    Built once at startup. Patterns are checked in registration order.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[tuple[str | re.Pattern[str], Compiler]] = ()) -> None:
        self._entries: tuple[CompilerEntry, ...] = tuple(
            CompilerEntry(re.compile(pattern), func) for pattern, func in entries
        )

    def match(self, path: str) -> CompilerEntry | None:
        """Return the first entry whose pattern matches *path*."""
        for entry in self._entries:
            if entry.matches(path):
                return entry
        return None

    def __iter__(self) -> Iterator[CompilerEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        patterns = ", ".join(entry.pattern.pattern for entry in self._entries)
        return f"CompilerTable([{patterns}])"


__all__ = [
    "CompileContext",
    "CompileResult",
    "Compiled",
    "Compiler",
    "CompilerEntry",
    "CompilerTable",
]
