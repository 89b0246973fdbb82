"""Module manifests and ``name@version`` references.

Every module folder carries a ``manifest.json``::

    {
        "uuid": "4f1c...",
        "slug": "users",
        "version": "1.0",
        "dependencies": ["auth@1.0"],
        "routes": "Routes/routes.py",
        "shortcuts": "Routes/shortcuts.json"
    }

``routes`` and ``shortcuts`` are optional paths relative to the module
folder. Without them the loader looks for ``Routes/routes.py`` and a
``shortcuts.json`` next to it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from axium.errors import ManifestError

MANIFEST_FILE = "manifest.json"


@dataclass(frozen=True, slots=True)
class ModuleRef:
    """A requested module: folder name plus the exact version required."""

    name: str
    version: str

    @classmethod
    def parse(cls, text: str) -> ModuleRef:
        """Parse ``"name@version"``. Raises ``ManifestError`` if malformed."""
        name, sep, version = text.strip().partition("@")
        if not sep or not name or not version:
            msg = f"Invalid module reference {text!r}; expected 'name@version'"
            raise ManifestError(msg)
        return cls(name=name, version=version)

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True, slots=True)
class Manifest:
    """A parsed ``manifest.json``. Read-only once loaded."""

    uuid: str
    slug: str
    version: str
    folder: Path
    dependencies: tuple[ModuleRef, ...] = ()
    routes: str | None = None
    shortcuts: str | None = None

    @classmethod
    def load(cls, folder: Path) -> Manifest:
        """Read and validate the manifest inside *folder*.

        Raises ``ManifestError`` when the file is missing, is not valid
        JSON, or lacks a required field.
        """
        path = folder / MANIFEST_FILE
        if not path.is_file():
            msg = f"Manifest for module '{folder.name}' not found."
            raise ManifestError(msg)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"Failed to decode the manifest of module '{folder.name}': {exc}"
            raise ManifestError(msg) from exc
        return cls.from_dict(data, folder)

    @classmethod
    def from_dict(cls, data: Any, folder: Path) -> Manifest:
        if not isinstance(data, dict):
            msg = f"Manifest of module '{folder.name}' must be a JSON object."
            raise ManifestError(msg)

        def required(key: str) -> str:
            value = data.get(key)
            if not isinstance(value, str) or not value:
                msg = f"Manifest of module '{folder.name}' has no valid '{key}'."
                raise ManifestError(msg)
            return value

        def optional(key: str) -> str | None:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                msg = f"Manifest field '{key}' of module '{folder.name}' must be a string."
                raise ManifestError(msg)
            return value or None

        deps = data.get("dependencies") or []
        if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
            msg = f"Manifest 'dependencies' of module '{folder.name}' must be a list of strings."
            raise ManifestError(msg)

        return cls(
            uuid=required("uuid"),
            slug=required("slug"),
            version=required("version"),
            folder=folder,
            dependencies=tuple(ModuleRef.parse(d) for d in deps),
            routes=optional("routes"),
            shortcuts=optional("shortcuts"),
        )
