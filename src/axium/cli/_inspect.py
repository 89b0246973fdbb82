"""``axium routes`` and ``axium modules`` — print an app's tables."""

import argparse

from axium.cli._resolve import resolve_or_exit


def _print_table(header: tuple[str, ...], rows: list[tuple[str, ...]]) -> None:
    widths = [max(len(header[i]), *(len(r[i]) for r in rows)) for i in range(len(header))]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"
    print(fmt.format(*header))
    print("-" * min(sum(widths) + 2 * (len(widths) - 1), 80))
    for row in rows:
        print(fmt.format(*row))


def run_routes(args: argparse.Namespace) -> None:
    """List every route in registration order (the order they are matched in)."""
    app = resolve_or_exit(args)
    routes = app.routes.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [
        (
            route.method,
            route.path,
            route.handler.name,
            ", ".join(str(spec) for spec in route.middlewares),
        )
        for route in routes
    ]
    _print_table(("METHOD", "PATH", "HANDLER", "MIDDLEWARE"), rows)


def run_modules(args: argparse.Namespace) -> None:
    """List activated modules in activation order with their shortcuts."""
    app = resolve_or_exit(args)
    if not len(app.modules):
        print("No modules activated.")
        return

    rows = [
        (
            manifest.slug,
            manifest.version,
            manifest.uuid,
            ", ".join(sorted(app.modules.shortcuts(manifest.slug))),
        )
        for manifest in app.modules
    ]
    _print_table(("SLUG", "VERSION", "UUID", "SHORTCUTS"), rows)
