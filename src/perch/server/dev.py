"""Development server.

Starts a pounce ASGI server with the live perch App object.
"""

from typing import Any


def run_dev_server(
    app: Any,
    host: str,
    port: int,
    *,
    reload: bool = False,
    app_path: str | None = None,
) -> None:
    """Serve *app* with pounce in a single worker.

    Pounce's ``run()`` takes an import string, but here we hold a live
    ``App``, so ``pounce.Server`` is driven directly with the ASGI
    callable. Pass *app_path* (``"module:attribute"``) together with
    *reload* to have pounce re-import the app when files change.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=1, reload=reload)
    server = Server(config, app, app_path=app_path)
    server.run()
