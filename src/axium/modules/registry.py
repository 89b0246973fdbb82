"""Record of activated modules owned by one ``App``."""

import re
from collections.abc import Iterator, Mapping
from typing import Any

from axium.modules.manifest import Manifest

_TOKEN = re.compile(r"\{(\w+)\}", re.ASCII)


class ModuleRegistry:
    """Activated module uuids (in activation order), their manifests and shortcuts.

    Grows monotonically; nothing is ever deactivated.
    """

    __slots__ = ("_manifests", "_shortcuts")

    def __init__(self) -> None:
        self._manifests: dict[str, Manifest] = {}
        self._shortcuts: dict[str, dict[str, Any]] = {}

    def is_active(self, uuid: str) -> bool:
        return uuid in self._manifests

    def activate(self, manifest: Manifest) -> None:
        self._manifests[manifest.uuid] = manifest

    def add_shortcuts(self, slug: str, shortcuts: Mapping[str, Any]) -> None:
        self._shortcuts.setdefault(slug, {}).update(shortcuts)

    @property
    def uuids(self) -> tuple[str, ...]:
        return tuple(self._manifests)

    def manifest(self, uuid: str) -> Manifest | None:
        return self._manifests.get(uuid)

    def shortcuts(self, slug: str) -> dict[str, Any]:
        """Shortcut definitions recorded for *slug* (empty if none)."""
        return dict(self._shortcuts.get(slug, {}))

    def shortcut(self, slug: str, name: str, **params: Any) -> str:
        """Return the path aliased by shortcut *name* of module *slug*.

        ``{param}`` tokens are replaced by the matching keyword argument::

            app.modules.shortcut("users", "profile", id=42)  # "/users/42"

        Raises ``KeyError`` for an unknown slug, shortcut, or parameter.
        """
        try:
            path = self._shortcuts[slug][name]
        except KeyError:
            msg = f"Shortcut '{name}' of module '{slug}' is not registered"
            raise KeyError(msg) from None

        def substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key not in params:
                msg = f"Missing parameter '{key}' for shortcut '{slug}.{name}'"
                raise KeyError(msg)
            return str(params[key])

        return _TOKEN.sub(substitute, str(path))

    def __iter__(self) -> Iterator[Manifest]:
        return iter(self._manifests.values())

    def __len__(self) -> int:
        return len(self._manifests)

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._manifests
