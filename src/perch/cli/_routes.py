"""``perch routes`` — print the route table.

Builds the table exactly as ``perch serve`` would and prints it in
evaluation order with PREFIX, KIND, and TARGET columns.
"""

import argparse
import sys

from perch.cli._options import table_options
from perch.routing.table import DEFAULT_EXCLUDE, build_route_table


def run_routes(args: argparse.Namespace) -> None:
    """List the URL prefixes the dev server would map."""
    options = table_options(args)
    try:
        table = build_route_table(
            options["base_dir"],
            options["map"],
            exclude=options.get("exclude", DEFAULT_EXCLUDE),
        )
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not table:
        print("No routes mapped.")
        return

    rows = [
        ("/" + prefix, "dir" if table.is_dir(prefix) else "file", str(table[prefix]))
        for prefix in table
    ]

    max_prefix = max(max(len(r[0]) for r in rows), 6)  # "PREFIX" header
    fmt = f"{{:<{max_prefix}}}  {{:<4}}  {{}}"
    print(fmt.format("PREFIX", "KIND", "TARGET"))
    sep_len = max_prefix + 8 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for prefix, kind, target in rows:
        print(fmt.format(prefix, kind, target))
