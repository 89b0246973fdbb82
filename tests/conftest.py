"""Shared fixtures: on-disk module trees for loader tests."""

import json
import textwrap
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

DEFAULT_ROUTES = """
def register(app):
    app.get("/{slug}", lambda: "{slug}")
"""


@pytest.fixture
def modules_dir(tmp_path: Path) -> Path:
    path = tmp_path / "modules"
    path.mkdir()
    return path


@pytest.fixture
def make_module(modules_dir: Path) -> Callable[..., Path]:
    """Write a module folder with a manifest and, by default, a route file."""

    def _make(
        folder: str,
        *,
        uuid: str | None = None,
        slug: str | None = None,
        version: str = "1.0",
        dependencies: Sequence[str] = (),
        routes: str | None = DEFAULT_ROUTES,
        routes_path: str = "Routes/routes.py",
        shortcuts: dict[str, Any] | None = None,
        manifest_extra: dict[str, Any] | None = None,
    ) -> Path:
        slug = slug or folder.lower()
        module = modules_dir / folder
        module.mkdir(parents=True)
        manifest = {
            "uuid": uuid or f"uuid-{slug}",
            "slug": slug,
            "version": version,
            "dependencies": list(dependencies),
            **(manifest_extra or {}),
        }
        (module / "manifest.json").write_text(json.dumps(manifest))
        if routes is not None:
            route_file = module / routes_path
            route_file.parent.mkdir(parents=True, exist_ok=True)
            route_file.write_text(textwrap.dedent(routes.replace("{slug}", slug)))
            if shortcuts is not None:
                (route_file.parent / "shortcuts.json").write_text(json.dumps(shortcuts))
        return module

    return _make
