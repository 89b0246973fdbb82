"""Application log files and console logging setup.

``LoggerService`` is the ``(message, level, context)`` logger handed to
controllers and modules. It appends one line per call to a daily file::

    storage/logs/app-2026-10-17.log
    [2026-10-17 14:03:11][INFO] User 42 signed in

``configure_logging()`` wires the framework's own ``axium.*`` loggers to
the console at ``AppConfig.log_level``.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from axium.config import AppConfig
from axium.errors import ConfigurationError

LOG_FORMAT = "[%(asctime)s][%(label)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(config: AppConfig) -> logging.Logger:
    """Attach a console handler to the ``axium`` logger (idempotent)."""
    root = logging.getLogger("axium")
    level = logging.getLevelName(config.log_level.upper())
    root.setLevel(level if isinstance(level, int) else logging.INFO)
    if not any(getattr(h, "_axium_console", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, LOG_DATE_FORMAT))
        handler._axium_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root


class LoggerService:
    """Daily log files under ``<storage_path>/<log_dir>``.

    Usage::

        log = LoggerService(app.config)
        log.init()
        log.info("Report generated", {"rows": 120})
        log.log("Quota reached", "NOTICE")

    Levels are free-form labels written upper-cased; the standard names
    also set the record's numeric level so the file can be filtered.
    """

    __slots__ = (
        "_current_day",
        "_default_dir",
        "_handler",
        "_lock",
        "_logger",
        "log_dir",
        "storage_path",
    )

    def __init__(self, config: AppConfig) -> None:
        self.storage_path = Path(config.storage_path)
        self._default_dir = config.log_dir
        self.log_dir: Path | None = None
        # Private logger, kept out of logging.getLogger's registry.
        self._logger = logging.Logger("axium.app", logging.DEBUG)
        self._logger.propagate = False
        self._handler: logging.FileHandler | None = None
        self._current_day: str | None = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self.log_dir is not None

    def init(self, log_dir: str | None = None) -> None:
        """Create the log directory. Must be called before ``log()``.

        *log_dir* is relative to ``storage_path`` and defaults to
        ``AppConfig.log_dir``.
        """
        directory = self.storage_path / (log_dir or self._default_dir)
        directory.mkdir(parents=True, exist_ok=True)
        self.log_dir = directory

    def log(
        self,
        message: str,
        level: str = "INFO",
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Append *message* under *level*; *context* rides along on the record."""
        if self.log_dir is None:
            msg = "LoggerService is not initialized. Call init() first."
            raise ConfigurationError(msg)

        label = level.upper()
        numeric = logging.getLevelName(label)
        with self._lock:
            self._rotate(self.log_dir)
            self._logger.log(
                numeric if isinstance(numeric, int) else logging.INFO,
                message,
                extra={"label": label, "context": dict(context or {})},
            )

    def info(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(message, "INFO", context)

    def warning(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(message, "WARNING", context)

    def error(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(message, "ERROR", context)

    def debug(self, message: str, context: Mapping[str, Any] | None = None) -> None:
        self.log(message, "DEBUG", context)

    def file_for(self, day: str) -> Path:
        """Path of the log file for *day* (``YYYY-mm-dd``)."""
        if self.log_dir is None:
            msg = "LoggerService is not initialized. Call init() first."
            raise ConfigurationError(msg)
        return self.log_dir / f"app-{day}.log"

    def __enter__(self) -> LoggerService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the current day's file; the next ``log()`` reopens it."""
        with self._lock:
            if self._handler is not None:
                self._logger.removeHandler(self._handler)
                self._handler.close()
                self._handler = None
                self._current_day = None

    def _rotate(self, directory: Path) -> None:
        day = datetime.now().strftime("%Y-%m-%d")
        if day == self._current_day and self._handler is not None:
            return
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
        handler = logging.FileHandler(directory / f"app-{day}.log", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        self._logger.addHandler(handler)
        self._handler = handler
        self._current_day = day
