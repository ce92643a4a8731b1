"""perch CLI — dev server and route table inspection.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def _add_table_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by every command that builds a route table."""
    parser.add_argument(
        "base_dir",
        nargs="?",
        default=".",
        help="Root of the served tree (default: current directory)",
    )
    parser.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="PREFIX=DIR",
        help="Map a URL prefix to a directory or file (repeatable, overrides discovery)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="NAME",
        help="Directory name never auto-mapped (repeatable, replaces the defaults)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="perch — a development web server for single-page applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch serve ------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Start the dev server")
    _add_table_arguments(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument("--root", default="/", help="URL prefix all mappings live under")
    serve_parser.add_argument("--index", default=None, help="Fallback document for client routes")
    serve_parser.add_argument("--favicon", default=None, help="Icon served at /favicon.ico")
    serve_parser.add_argument(
        "--no-push-state",
        action="store_true",
        help="Answer unmatched paths with 404 instead of the index document",
    )
    serve_parser.add_argument(
        "--ssl",
        action="store_true",
        default=None,
        help="Serve HTTPS using ssl/server.crt and ssl/server.key under the base directory",
    )
    serve_parser.add_argument("--certfile", default=None, help="TLS certificate file")
    serve_parser.add_argument("--keyfile", default=None, help="TLS private key file")
    serve_parser.add_argument(
        "--live-reload",
        action="store_true",
        help="Inject the live-reload client into HTML responses",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when Python sources change",
    )
    serve_parser.add_argument("--debug", action="store_true", help="Show error details")
    serve_parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging verbosity (default: info)",
    )

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="Print the route table")
    _add_table_arguments(routes_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from perch.cli._serve import run_serve

        run_serve(args)
    elif args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
