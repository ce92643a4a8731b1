"""``perch serve`` — start the development server.

Builds a ``ServerConfig`` from defaults, then ``HOST``/``PORT``/``SSL``
environment variables, then CLI flags (highest precedence), and runs a
``DevServer`` with it.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from perch.app import LOG_FORMAT, DevServer
from perch.cli._options import table_options
from perch.config import ServerConfig, TLSMaterial
from perch.errors import ConfigurationError


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Merge environment and CLI flags into a config."""
    overrides: dict[str, Any] = table_options(args)
    overrides.update(
        root=args.root,
        push_state=not args.no_push_state,
        live_reload=args.live_reload,
        reload=args.reload,
        debug=args.debug,
        log_level=args.log_level,
    )
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.index is not None:
        overrides["index"] = Path(args.index)
    if args.favicon is not None:
        overrides["favicon"] = Path(args.favicon)

    if args.certfile or args.keyfile:
        if not (args.certfile and args.keyfile):
            print("Error: --certfile and --keyfile must be given together", file=sys.stderr)
            raise SystemExit(2)
        overrides["ssl"] = TLSMaterial(certfile=Path(args.certfile), keyfile=Path(args.keyfile))
    elif args.ssl:
        overrides["ssl"] = True

    return ServerConfig.from_env(**overrides)


def run_serve(args: argparse.Namespace) -> None:
    """Configure logging and run the dev server until interrupted."""
    logging.basicConfig(
        level=args.log_level.upper(),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )

    try:
        config = build_config(args)
        server = DevServer(config)
        server.run()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
