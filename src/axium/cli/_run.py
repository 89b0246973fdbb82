"""``axium run`` — development server command."""

import argparse

from axium.cli._resolve import resolve_or_exit
from axium.log import configure_logging


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it with pounce."""
    app = resolve_or_exit(args)
    app._ensure_frozen()
    configure_logging(app.config)

    from axium.server.dev import run_dev_server

    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=args.reload or app.config.debug,
        app_path=args.app,
    )
