"""Route table — URL prefix to filesystem target mapping.

Built once at startup from two sources: the immediate subdirectories of
the base directory, merged with explicit overrides (overrides win). The
resulting ``RouteTable`` is immutable and evaluated most-specific first.
"""

import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

# Directory names never auto-mapped: VCS metadata, dependencies, logs, tests.
DEFAULT_EXCLUDE: frozenset[str] = frozenset(
    {".git", "node_modules", "log", "logs", "test", "tests"}
)


def normalize_prefix(prefix: str) -> str:
    """Normalize a URL prefix to its table key form (no surrounding slashes)."""
    return prefix.strip("/")


@dataclass(frozen=True, slots=True)
class PrefixMatch:
    """Result of a successful prefix lookup.

    Attributes:
        prefix: The table key that matched.
        target: The directory (or single file) the prefix maps to.
        remainder: The rest of the request path after the prefix,
            including its leading ``/`` (empty for exact matches).
        is_dir: Whether *target* was a directory when the table was built.
    """

    prefix: str
    target: Path
    remainder: str
    is_dir: bool

    @property
    def path(self) -> Path:
        """Filesystem path the request maps to."""
        if not self.remainder:
            return self.target
        return self.target / self.remainder.lstrip("/")


class RouteTable(Mapping[str, Path]):
    """Immutable prefix → target mapping.

    Iteration follows evaluation order: prefixes sorted in reverse
    lexicographic order, so ``"a/b"`` is tried before ``"a"``. Whether a
    target is a directory is recorded once at construction.

    A directory target matches the prefix itself and anything below
    ``prefix/``. A file target matches the prefix exactly.

    Usage::

        table = RouteTable({"vendor": "/srv/app/vendor", "app": "/srv/app/src"})
        match = table.match("vendor/jquery.js")
        match.path  # PosixPath('/srv/app/vendor/jquery.js')
    """

    __slots__ = ("_dirs", "_entries", "_order")

    def __init__(self, entries: Mapping[str, str | Path] | None = None) -> None:
        normalized = {normalize_prefix(k): Path(v) for k, v in (entries or {}).items()}
        self._entries: dict[str, Path] = normalized
        self._order: tuple[str, ...] = tuple(sorted(normalized, reverse=True))
        self._dirs: frozenset[str] = frozenset(k for k, v in normalized.items() if v.is_dir())

    def __getitem__(self, prefix: str) -> Path:
        return self._entries[normalize_prefix(prefix)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {str(self._entries[k])!r}" for k in self._order)
        return f"RouteTable({{{items}}})"

    def is_dir(self, prefix: str) -> bool:
        """Whether *prefix* maps to a directory."""
        return normalize_prefix(prefix) in self._dirs

    def match(self, path: str) -> PrefixMatch | None:
        """Find the first prefix (in evaluation order) whose rule matches *path*.

        *path* is relative to the server root and has no leading slash,
        e.g. ``"vendor/jquery.js"``.
        """
        for prefix in self._order:
            is_dir = prefix in self._dirs
            if is_dir:
                matched = path == prefix or path.startswith(prefix + "/")
            else:
                matched = path == prefix
            if matched:
                return PrefixMatch(
                    prefix=prefix,
                    target=self._entries[prefix],
                    remainder=path[len(prefix) :],
                    is_dir=is_dir,
                )
        return None


def discover_directories(
    base_dir: str | Path,
    exclude: frozenset[str] | set[str] = DEFAULT_EXCLUDE,
) -> dict[str, Path]:
    """Map each visible, non-excluded child directory of *base_dir* to itself.

    Hidden entries (leading ``.``) and names in *exclude* are skipped;
    plain files are ignored.
    """
    base = Path(base_dir)
    found: dict[str, Path] = {}
    with os.scandir(base) as entries:
        for entry in entries:
            if entry.name.startswith(".") or entry.name in exclude:
                continue
            if not entry.is_dir():
                continue
            found[entry.name] = base / entry.name
    return found


def build_route_table(
    base_dir: str | Path,
    overrides: Mapping[str, str | Path] | None = None,
    *,
    exclude: frozenset[str] | set[str] = DEFAULT_EXCLUDE,
) -> RouteTable:
    """Build the frozen route table for *base_dir*.

    Auto-discovered directories come first; *overrides* replace or add
    entries on top. Relative override targets are resolved against
    *base_dir*.
    """
    base = Path(base_dir)
    merged: dict[str, Path] = dict(discover_directories(base, exclude))
    for prefix, target in (overrides or {}).items():
        merged[normalize_prefix(prefix)] = base / target
    return RouteTable(merged)
