"""URL prefix mapping and request path resolution."""

from perch.routing.resolver import (
    CompiledHit,
    Decision,
    Denied,
    FallbackHit,
    FileHit,
    MappedPath,
    Miss,
    PathResolver,
)
from perch.routing.table import (
    DEFAULT_EXCLUDE,
    PrefixMatch,
    RouteTable,
    build_route_table,
    discover_directories,
)

__all__ = [
    "DEFAULT_EXCLUDE",
    "CompiledHit",
    "Decision",
    "Denied",
    "FallbackHit",
    "FileHit",
    "MappedPath",
    "Miss",
    "PathResolver",
    "PrefixMatch",
    "RouteTable",
    "build_route_table",
    "discover_directories",
]
