"""Path resolver — decide what to serve for a request path.

Resolution runs as an ordered sequence of stages. Each stage returns a
decision or ``None`` (a miss), and the first decision wins:

1. **compile** — the first compiler pattern that matches the path reads
   the mapped file and hands it to the compiler. A missing file is a miss
   and no further compiler patterns are tried.
2. **file** — the mapped file is served as-is.
3. **fallback** — with push-state routing on, the index document is served
   for any path (client-side routing). Otherwise the request is a miss.

Only a missing file counts as a miss. Other I/O errors (permission
denied, read errors) propagate to the caller.

The resolver holds no per-request state and never caches: every call
re-reads from disk.
"""

from dataclasses import dataclass
from pathlib import Path

from perch.compilers import CompilerEntry, CompilerTable
from perch.routing.table import RouteTable

_MISSING = (FileNotFoundError, IsADirectoryError, NotADirectoryError)


@dataclass(frozen=True, slots=True)
class MappedPath:
    """A request path translated to the filesystem.

    Attributes:
        path: Canonical filesystem path the request maps to.
        bound: Directory the path must stay inside.
    """

    path: Path
    bound: Path

    @property
    def contained(self) -> bool:
        return self.path == self.bound or self.path.is_relative_to(self.bound)


@dataclass(frozen=True, slots=True)
class CompiledHit:
    """A compiler matched and its source file was read."""

    entry: CompilerEntry
    path: Path
    source: bytes


@dataclass(frozen=True, slots=True)
class FileHit:
    """A mapped file exists and is served as-is."""

    path: Path
    body: bytes


@dataclass(frozen=True, slots=True)
class FallbackHit:
    """No asset matched; the fallback index document is served."""

    path: Path
    body: bytes


@dataclass(frozen=True, slots=True)
class Denied:
    """The mapped path escapes its directory."""

    path: Path


@dataclass(frozen=True, slots=True)
class Miss:
    """Nothing matched and there is no fallback."""

    path: str


type Decision = CompiledHit | FileHit | FallbackHit | Denied | Miss


def read_if_present(path: Path) -> bytes | None:
    """Read *path*, returning ``None`` when there is no file there."""
    try:
        return path.read_bytes()
    except _MISSING:
        return None


class PathResolver:
    """Resolve request paths against a route table, compilers, and a fallback.

    Usage::

        resolver = PathResolver(
            base_dir=Path("/srv/app"),
            routes=build_route_table("/srv/app"),
            compilers=CompilerTable(DEFAULT_COMPILERS),
            index=Path("/srv/app/index.html"),
        )
        decision = resolver.resolve("/app/main.scss?v=3")
    """

    __slots__ = ("_base_dir", "_compilers", "_index", "_push_state", "_root", "_routes")

    def __init__(
        self,
        *,
        base_dir: Path,
        routes: RouteTable,
        compilers: CompilerTable,
        index: Path,
        root: str = "/",
        push_state: bool = True,
    ) -> None:
        self._base_dir = base_dir.resolve()
        self._routes = routes
        self._compilers = compilers
        self._index = index
        self._root = root if root.endswith("/") else root + "/"
        self._push_state = push_state

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def compilers(self) -> CompilerTable:
        return self._compilers

    def resolve(self, request_path: str) -> Decision:
        """Decide what to serve for *request_path* (query string allowed)."""
        path = request_path.split("?", 1)[0]
        relative = self.strip_root(path)

        # No file name can contain NUL; such paths skip straight to the fallback.
        if relative is not None and "\x00" not in relative:
            mapped = self.map_path(relative)
            if not mapped.contained:
                return Denied(mapped.path)

            decision = self._compile_stage(relative, mapped.path) or self._file_stage(mapped.path)
            if decision is not None:
                return decision

        return self._fallback_stage(path)

    def strip_root(self, path: str) -> str | None:
        """Path relative to the root prefix, or ``None`` if outside it."""
        if path + "/" == self._root:
            return ""
        if not path.startswith(self._root):
            return None
        return path[len(self._root) :]

    def map_path(self, relative: str) -> MappedPath:
        """Translate a root-relative path to the filesystem.

        The first route-table prefix whose rule matches wins; unmatched
        paths map below the base directory. The result is canonicalized
        so ``..`` segments cannot escape the bound directory unnoticed.
        """
        match = self._routes.match(relative)
        if match is None:
            return MappedPath(
                path=(self._base_dir / relative).resolve(),
                bound=self._base_dir,
            )
        target = match.target.resolve()
        if not match.is_dir:
            return MappedPath(path=target, bound=target)
        return MappedPath(path=match.path.resolve(), bound=target)

    # -- Stages --

    def _compile_stage(self, relative: str, mapped: Path) -> CompiledHit | None:
        entry = self._compilers.match(relative)
        if entry is None:
            return None
        source = read_if_present(mapped)
        if source is None:
            return None
        return CompiledHit(entry=entry, path=mapped, source=source)

    def _file_stage(self, mapped: Path) -> FileHit | None:
        body = read_if_present(mapped)
        if body is None:
            return None
        return FileHit(path=mapped, body=body)

    def _fallback_stage(self, path: str) -> FallbackHit | Miss:
        if not self._push_state:
            return Miss(path)
        body = read_if_present(self._index)
        if body is None:
            return Miss(path)
        return FallbackHit(path=self._index, body=body)
