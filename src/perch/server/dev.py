"""Development server launcher.

Starts a pounce ASGI server with the live perch ``DevServer`` object in
single-worker mode.
"""

from perch.config import TLSMaterial


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    tls: TLSMaterial | None = None,
) -> None:
    """Start a pounce server with the given ASGI app.

    Pounce's ``run()`` takes an import string, but perch has a live
    ``DevServer`` object, so ``pounce.Server`` is used directly with the
    ASGI callable.

    Args:
        app: ASGI callable (perch DevServer instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart when Python sources change.
        tls: Certificate and key files; ``None`` serves plain HTTP.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        ssl_certfile=str(tls.certfile) if tls else None,
        ssl_keyfile=str(tls.keyfile) if tls else None,
    )
    server = Server(config, app)
    server.run()
