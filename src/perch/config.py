"""Server configuration.

ServerConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups. It is resolved once at
startup and never mutated after the listening socket opens.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from perch.compilers import Compiler
from perch.compilers.stylesheet import DEFAULT_COMPILERS
from perch.errors import ConfigurationError
from perch.routing.table import DEFAULT_EXCLUDE

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True, slots=True)
class TLSMaterial:
    """Certificate and private key files for HTTPS."""

    certfile: Path
    keyfile: Path


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Dev server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(base_dir="./app", port=3000, push_state=False)

    ``favicon`` and ``index`` default to files inside ``base_dir``; call
    ``resolved()`` to get a copy with every path made concrete.
    """

    # Served tree
    base_dir: str | Path = "."
    root: str = "/"
    favicon: str | Path | None = None  # Defaults to <base_dir>/favicon.ico
    index: str | Path | None = None  # Defaults to <base_dir>/index.html

    # Serve the index document for unmatched paths (client-side routing)
    push_state: bool = True

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False  # Restart on Python source changes (pounce reload)
    debug: bool = False

    # TLS: True loads <base_dir>/ssl/server.crt + server.key; or pass material
    ssl: bool | TLSMaterial = False

    # Route table
    exclude: frozenset[str] = DEFAULT_EXCLUDE
    map: Mapping[str, str | Path] = field(default_factory=dict)

    # Compile-on-read: (pattern, compiler) pairs in registration order
    compilers: tuple[tuple[str, Compiler], ...] = DEFAULT_COMPILERS

    # Push channel
    events_path: str = "/__perch/events"
    heartbeat_interval: float = 15.0
    live_reload: bool = False  # Inject the reload client into HTML responses

    # Logging
    log_level: str = "info"

    @property
    def protocol(self) -> str:
        return "https" if self.ssl else "http"

    @property
    def favicon_path(self) -> Path:
        if self.favicon is not None:
            return Path(self.favicon)
        return Path(self.base_dir) / "favicon.ico"

    @property
    def index_path(self) -> Path:
        if self.index is not None:
            return Path(self.index)
        return Path(self.base_dir) / "index.html"

    def resolved(self) -> "ServerConfig":
        """Return a copy with an absolute ``base_dir`` and concrete paths.

        Raises:
            ConfigurationError: If ``base_dir`` is not a directory or
                ``root`` does not start with ``/``.
        """
        base = Path(self.base_dir).resolve()
        if not base.is_dir():
            msg = f"Base directory {str(base)!r} does not exist or is not a directory."
            raise ConfigurationError(msg)
        if not self.root.startswith("/"):
            msg = f"root must start with '/', got {self.root!r}."
            raise ConfigurationError(msg)
        with_base = replace(self, base_dir=base)
        return replace(
            with_base,
            favicon=with_base.favicon_path,
            index=with_base.index_path,
            root=self.root if self.root.endswith("/") else self.root + "/",
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "ServerConfig":
        """Build a config from ``HOST``, ``PORT`` and ``SSL`` environment variables.

        Explicit *overrides* win over the environment, which wins over the
        defaults.

        Raises:
            ConfigurationError: If ``PORT`` or ``SSL`` cannot be parsed.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        if env.get("HOST"):
            values["host"] = env["HOST"]

        if env.get("PORT"):
            try:
                values["port"] = int(env["PORT"])
            except ValueError as exc:
                msg = f"PORT must be an integer, got {env['PORT']!r}."
                raise ConfigurationError(msg) from exc

        if "SSL" in env:
            values["ssl"] = _parse_bool("SSL", env["SSL"])

        values.update(overrides)
        return cls(**values)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    msg = f"{name} must be a boolean (true/false), got {value!r}."
    raise ConfigurationError(msg)
