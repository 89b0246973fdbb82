"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env()`` builds one from a
``.env`` file so deployments keep their settings out of code.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from dotenv import dotenv_values, load_dotenv

from axium.errors import ConfigurationError


class RouterMode(StrEnum):
    """How the dispatcher emits handler output."""

    VIEW = "VIEW"
    JSON = "JSON"


class DependencyOrder(StrEnum):
    """When a module's dependencies are activated relative to itself."""

    SELF_FIRST = "SELF_FIRST"
    DEPENDENCIES_FIRST = "DEPENDENCIES_FIRST"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    Every field has a default except the router mode, which must be chosen
    explicitly before the app serves its first request::

        config = AppConfig(router_mode=RouterMode.JSON, module_path="modules")
    """

    # Dispatch
    router_mode: RouterMode | None = None
    debug: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Views
    view_path: str | Path = "views"
    error_404_view: str | Path | None = None
    autoescape: bool = True

    # Modules
    module_path: str | Path = "modules"
    ini_system_path: str | Path = "config"
    dependency_order: DependencyOrder = DependencyOrder.SELF_FIRST
    strict_module_folders: bool = False

    # Storage and logging
    storage_path: str | Path = "storage"
    log_dir: str = "logs"
    log_level: str = "info"

    # Every key read by from_env(), including ones axium does not use
    env: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_env(
        cls,
        path: str | Path = ".env",
        *,
        export: bool = False,
        **overrides: Any,
    ) -> AppConfig:
        """Build a config from a ``.env`` file.

        Keys are the upper-case field names (``ROUTER_MODE``,
        ``MODULE_PATH``, ``DEBUG``...). Every key of the file, known or
        not, is kept in ``env`` so collaborators such as a database layer
        can read their own settings. With *export*, the file is also
        loaded into ``os.environ`` without replacing variables that are
        already set. Keyword *overrides* win over file values.

        Raises ``ConfigurationError`` if the file does not exist or a value
        cannot be converted.
        """
        env_path = Path(path)
        if not env_path.is_file():
            msg = f"Environment file not found: {env_path}"
            raise ConfigurationError(msg)

        values = dotenv_values(env_path)
        if export:
            load_dotenv(env_path, override=False)

        kwargs: dict[str, Any] = {
            "env": MappingProxyType({k: v for k, v in values.items() if v is not None}),
        }
        for f in fields(cls):
            if f.name == "env":
                continue
            raw = values.get(f.name.upper())
            if raw is None or raw == "":
                continue
            kwargs[f.name] = _convert(f.name, raw)
        kwargs.update(overrides)
        return cls(**kwargs)

    def require_mode(self) -> RouterMode:
        """Return the router mode, or raise if it was never configured."""
        if self.router_mode is None:
            msg = "ROUTER_MODE is not defined."
            raise ConfigurationError(msg)
        return RouterMode(self.router_mode)


_BOOL_FIELDS = frozenset({"debug", "autoescape", "strict_module_folders"})
_INT_FIELDS = frozenset({"port"})


def _convert(name: str, raw: str) -> Any:
    """Convert a raw ``.env`` string to the type of config field *name*."""
    try:
        if name in _BOOL_FIELDS:
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if name in _INT_FIELDS:
            return int(raw)
        if name == "router_mode":
            return RouterMode(raw.strip().upper())
        if name == "dependency_order":
            return DependencyOrder(raw.strip().upper())
    except ValueError as exc:
        msg = f"Invalid value for {name.upper()}: {raw!r}"
        raise ConfigurationError(msg) from exc
    return raw
