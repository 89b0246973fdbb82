"""Development server.

Starts a pounce ASGI server with the live axium App object in
single-worker mode. pounce is an optional dependency
(``pip install axium[server]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from axium.errors import ConfigurationError

if TYPE_CHECKING:
    from axium.app import App


def run_dev_server(
    app: App,
    host: str,
    port: int,
    *,
    reload: bool = False,
    app_path: str | None = None,
) -> None:
    """Serve *app* on *host*:*port* until interrupted.

    When *app_path* (``"module:attribute"``) is given, pounce reimports
    the app on each reload so code changes take effect.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "The development server needs pounce: pip install 'axium[server]'"
        raise ConfigurationError(msg) from exc

    config = ServerConfig(host=host, port=port, workers=1, reload=reload)
    server = Server(config, app, app_path=app_path)
    server.run()
