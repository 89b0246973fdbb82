"""Manifest-driven module activation.

A module is a folder under ``module_path`` holding a ``manifest.json``,
optionally a route file and a ``shortcuts.json``::

    modules/
      Users/
        manifest.json
        Routes/
          routes.py        # def register(app): app.get("/users", ...)
          shortcuts.json   # {"profile": "/users/{id}"}
        Views/
          index.html

Modules are requested as ``"name@version"``. The folder name is matched
ignoring case and the manifest version must equal the requested one
exactly. Each module is activated at most once per ``App``, however many
times it is requested or depended upon.
"""

from __future__ import annotations

import importlib.util
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from axium._internal.paths import case_insensitive_matches, find_file, resolve_relative
from axium.config import AppConfig, DependencyOrder
from axium.errors import ConfigurationError, ManifestError
from axium.modules.manifest import Manifest, ModuleRef
from axium.modules.registry import ModuleRegistry

if TYPE_CHECKING:
    from axium.app import App

logger = logging.getLogger("axium.modules")

DEFAULT_ROUTES = "Routes/routes.py"
SHORTCUTS_FILE = "shortcuts.json"
ACTIVATION_FILE = "system-ini.json"


class ModuleLoader:
    """Activates modules and their dependencies into an ``App``.

    Usage::

        loader = ModuleLoader(app)
        loader.load_essential_modules()
        loader.load_active_modules()
        loader.load_module("Reports@2.1")

    With ``DependencyOrder.SELF_FIRST`` (the default) a module's route file
    runs before its dependencies are activated, so a dependency cycle
    simply stops at the first module seen twice. ``DEPENDENCIES_FIRST``
    activates dependencies first and raises ``ManifestError`` on a cycle.
    """

    __slots__ = ("_app", "_config", "_in_progress", "_registry")

    def __init__(self, app: App) -> None:
        self._app = app
        self._config: AppConfig = app.config
        self._registry: ModuleRegistry = app.modules
        self._in_progress: list[str] = []

    # -- Activation lists --

    def load_essential_modules(self) -> None:
        """Activate the ``Modules.essentials`` list of ``system-ini.json``."""
        self.activate(self._activation_list("essentials"))

    def load_active_modules(self) -> None:
        """Activate the ``Modules.active`` list of ``system-ini.json``."""
        self.activate(self._activation_list("active"))

    def load_module(self, ref: str | ModuleRef) -> None:
        """Activate a single module."""
        self.activate([ref])

    def _activation_list(self, key: str) -> list[str]:
        path = Path(self._config.ini_system_path) / ACTIVATION_FILE
        if not path.is_file():
            msg = f"Activation file not found: {path}"
            raise ConfigurationError(msg)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"Failed to decode activation file {path}: {exc}"
            raise ConfigurationError(msg) from exc

        modules = data.get("Modules", {}) if isinstance(data, dict) else None
        refs = modules.get(key, []) if isinstance(modules, dict) else None
        if not isinstance(refs, list):
            msg = f"'Modules.{key}' in {path} must be a list of 'name@version' strings"
            raise ConfigurationError(msg)
        return refs

    # -- Graph walk --

    def activate(self, refs: Iterable[str | ModuleRef]) -> None:
        """Activate every module in *refs*, recursing into dependencies."""
        for item in refs:
            ref = item if isinstance(item, ModuleRef) else ModuleRef.parse(item)
            manifest = Manifest.load(self._find_module_folder(ref.name))

            if self._registry.is_active(manifest.uuid):
                continue

            if manifest.version != ref.version:
                msg = (
                    f"Module '{ref.name}' version is incompatible. "
                    f"Required: {ref.version}. Installed: {manifest.version}"
                )
                raise ManifestError(msg)

            if self._config.dependency_order is DependencyOrder.DEPENDENCIES_FIRST:
                if manifest.uuid in self._in_progress:
                    chain = " -> ".join([*self._in_progress, manifest.uuid])
                    msg = f"Dependency cycle detected while activating '{ref}': {chain}"
                    raise ManifestError(msg)
                self._in_progress.append(manifest.uuid)
                try:
                    self.activate(manifest.dependencies)
                finally:
                    self._in_progress.pop()
                self._start(manifest)
            else:
                self._start(manifest)
                self.activate(manifest.dependencies)

    def _start(self, manifest: Manifest) -> None:
        """Register the module's routes and shortcuts, then mark it active.

        A failure part way through removes the routes it had added, so the
        module can be requested again.
        """
        mark = len(self._app.routes)
        try:
            route_file = self._route_file(manifest)
            if route_file is not None:
                self._register_routes(manifest, route_file)

            shortcuts_file = self._shortcuts_file(manifest, route_file)
            shortcuts = _read_shortcuts(shortcuts_file) if shortcuts_file is not None else {}
        except Exception:
            self._app.routes.truncate(mark)
            raise

        if shortcuts_file is not None:
            self._registry.add_shortcuts(manifest.slug, shortcuts)

        self._registry.activate(manifest)
        logger.info("Activated module %s@%s (%s)", manifest.slug, manifest.version, manifest.uuid)

    # -- Filesystem --

    def _find_module_folder(self, name: str) -> Path:
        base = Path(self._config.module_path)
        matches = case_insensitive_matches(base, name, directory=True)
        if not matches:
            msg = f"Module folder '{name}' not found in {base}"
            raise ManifestError(msg)
        if len(matches) > 1:
            names = ", ".join(m.name for m in matches)
            if self._config.strict_module_folders:
                msg = f"Module name '{name}' matches several folders: {names}"
                raise ManifestError(msg)
            logger.warning(
                "Module name '%s' matches several folders (%s); using '%s'",
                name,
                names,
                matches[0].name,
            )
        return matches[0]

    def _route_file(self, manifest: Manifest) -> Path | None:
        if manifest.routes is None:
            return resolve_relative(manifest.folder, DEFAULT_ROUTES)
        found = resolve_relative(manifest.folder, manifest.routes)
        if found is None:
            msg = f"Route file '{manifest.routes}' of module '{manifest.slug}' not found."
            raise ManifestError(msg)
        return found

    def _shortcuts_file(self, manifest: Manifest, route_file: Path | None) -> Path | None:
        if manifest.shortcuts is not None:
            found = resolve_relative(manifest.folder, manifest.shortcuts)
            if found is None:
                msg = (
                    f"Shortcuts file '{manifest.shortcuts}' "
                    f"of module '{manifest.slug}' not found."
                )
                raise ManifestError(msg)
            return found
        if route_file is not None:
            return find_file(route_file.parent, SHORTCUTS_FILE)
        return resolve_relative(manifest.folder, f"Routes/{SHORTCUTS_FILE}")

    def _register_routes(self, manifest: Manifest, route_file: Path) -> None:
        """Import *route_file* and hand the app to its ``register`` function."""
        spec = importlib.util.spec_from_file_location(
            f"_axium_routes_{manifest.slug}",
            route_file,
        )
        if spec is None or spec.loader is None:
            msg = f"Cannot import route file {route_file}"
            raise ManifestError(msg)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        register = getattr(module, "register", None)
        if register is None or not callable(register):
            msg = (
                f"Route file {route_file} of module '{manifest.slug}' "
                "has no register(app) function."
            )
            raise ManifestError(msg)

        before = len(self._app.routes)
        register(self._app)
        logger.debug(
            "Module %s registered %d route(s) from %s",
            manifest.slug,
            len(self._app.routes) - before,
            route_file,
        )


def _read_shortcuts(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"Failed to decode shortcuts file {path}: {exc}"
        raise ManifestError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Shortcuts file {path} must contain a JSON object."
        raise ManifestError(msg)
    return data
