"""Translate parsed CLI arguments into ``ServerConfig`` keyword arguments."""

import argparse
import sys
from typing import Any


def parse_map(entries: list[str]) -> dict[str, str]:
    """Parse ``PREFIX=DIR`` pairs.

    Raises:
        ValueError: If an entry has no ``=`` or an empty side.
    """
    mapping: dict[str, str] = {}
    for entry in entries:
        prefix, sep, target = entry.partition("=")
        if not sep or not prefix.strip("/") or not target:
            msg = f"Invalid --map entry {entry!r}, expected PREFIX=DIR"
            raise ValueError(msg)
        mapping[prefix] = target
    return mapping


def table_options(args: argparse.Namespace) -> dict[str, Any]:
    """Options shared by ``serve`` and ``routes``; exits 2 on bad input."""
    try:
        mapping = parse_map(args.map)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    options: dict[str, Any] = {"base_dir": args.base_dir, "map": mapping}
    if args.exclude is not None:
        options["exclude"] = frozenset(args.exclude)
    return options
