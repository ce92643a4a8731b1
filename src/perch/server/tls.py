"""TLS material loading.

``ServerConfig.ssl`` is either a boolean or explicit ``TLSMaterial``.
``True`` means "use the conventional files": ``ssl/server.crt`` and
``ssl/server.key`` under the base directory. Either way the files are
checked for readability before the server starts, so a bad path fails
fast instead of on the first handshake.
"""

from pathlib import Path

from perch.config import ServerConfig, TLSMaterial
from perch.errors import StartupConfigError

DEFAULT_CERTFILE = Path("ssl") / "server.crt"
DEFAULT_KEYFILE = Path("ssl") / "server.key"


def load_tls_material(config: ServerConfig) -> TLSMaterial | None:
    """Return the TLS files to serve with, or ``None`` for plain HTTP.

    Raises:
        StartupConfigError: If TLS is requested and either file is
            missing or unreadable.
    """
    if isinstance(config.ssl, TLSMaterial):
        material = config.ssl
    elif config.ssl:
        base = Path(config.base_dir)
        material = TLSMaterial(
            certfile=base / DEFAULT_CERTFILE,
            keyfile=base / DEFAULT_KEYFILE,
        )
    else:
        return None

    for label, path in (("certificate", material.certfile), ("private key", material.keyfile)):
        try:
            with open(path, "rb") as fh:
                fh.read(1)
        except OSError as exc:
            msg = f"Cannot read TLS {label} {str(path)!r}: {exc.strerror or exc}"
            raise StartupConfigError(msg) from exc

    return material
