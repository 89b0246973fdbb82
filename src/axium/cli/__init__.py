"""Axium CLI — route and module inspection, dev server.

Entry point registered as ``axium`` in ``pyproject.toml``::

    [project.scripts]
    axium = "axium.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``axium`` command."""
    parser = argparse.ArgumentParser(
        prog="axium",
        description="Axium — routing and module composition for web applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- axium routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- axium modules ----------------------------------------------------
    modules_parser = subparsers.add_parser("modules", help="List activated modules")
    modules_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- axium run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on file changes (defaults to the app's debug setting)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from axium.cli._inspect import run_routes

        run_routes(args)
    elif args.command == "modules":
        from axium.cli._inspect import run_modules

        run_modules(args)
    elif args.command == "run":
        from axium.cli._run import run_server

        run_server(args)
