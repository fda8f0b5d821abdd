from __future__ import annotations

import logging
import os
import pathlib
import sys
from typing import Any, Dict, List, Optional, Union

import structlog
from pythonjsonlogger import jsonlogger

from pkgsmith.utils.exceptions import ConfigurationError


class LoggingManager:
    """Configures logging for a pkgsmith run.

    Sets up Python's logging module with a console handler (and optionally a
    file handler), and routes structlog through it so that packagers can emit
    structured events such as ``state`` or ``command`` alongside the message.
    """

    # Mapping from string log levels to logging module constants
    LOG_LEVELS = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }

    FORMATS = ("json", "text")

    def __init__(
            self,
            level: str = "info",
            fmt: str = "json",
            file_path: Optional[Union[str, pathlib.Path]] = None,
    ) -> None:
        """Initialize the Logging Manager.

        Args:
            level: Log level name (debug, info, warning, error, critical).
            fmt: Output format, either ``json`` or ``text``.
            file_path: Optional path of a log file to write in addition to stdout.
        """
        if fmt.lower() not in self.FORMATS:
            raise ConfigurationError(
                f"Unsupported log format: {fmt}", config_key="logging.format"
            )
        self._level = self.LOG_LEVELS.get(level.lower(), logging.INFO)
        self._format = fmt.lower()
        self._file_path = pathlib.Path(file_path) if file_path else None
        self._root_logger: Optional[logging.Logger] = None
        self._handlers: List[logging.Handler] = []
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def level(self) -> int:
        return self._level

    def initialize(self) -> None:
        """Install handlers on the root logger and configure structlog.

        Raises:
            ConfigurationError: If the log file cannot be opened.
        """
        self._root_logger = logging.getLogger()
        self._root_logger.setLevel(self._level)

        # Remove any existing handlers
        for handler in list(self._root_logger.handlers):
            self._root_logger.removeHandler(handler)

        formatter = self._create_formatter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self._level)
        console_handler.setFormatter(formatter)
        self._root_logger.addHandler(console_handler)
        self._handlers.append(console_handler)

        if self._file_path:
            try:
                os.makedirs(self._file_path.parent, exist_ok=True)
                file_handler = logging.FileHandler(self._file_path, encoding="utf-8")
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot open log file {self._file_path}: {e}",
                    config_key="logging.file",
                ) from e
            file_handler.setLevel(self._level)
            file_handler.setFormatter(formatter)
            self._root_logger.addHandler(file_handler)
            self._handlers.append(file_handler)

        self._configure_structlog()
        self._initialized = True

    def _create_formatter(self) -> logging.Formatter:
        if self._format == "json":
            return jsonlogger.JsonFormatter(
                fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
                json_ensure_ascii=False,
            )
        return logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def _configure_structlog(self) -> None:
        """Configure structlog for structured logging."""
        if self._format == "json":
            # Event becomes the record message, bound keys become JSON fields
            renderer: Any = structlog.stdlib.render_to_log_kwargs
        else:
            renderer = structlog.processors.KeyValueRenderer(
                key_order=["event"], drop_missing=True
            )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                renderer,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

    def get_logger(self, name: str) -> Any:
        """Get a logger for a specific component.

        Args:
            name: The name of the component requesting a logger.

        Returns:
            A structlog bound logger, or a plain logger before initialization.
        """
        if not self._initialized:
            return logging.getLogger(name)
        return structlog.get_logger(name)

    def shutdown(self) -> None:
        """Flush and detach every handler installed by :meth:`initialize`."""
        if not self._initialized:
            return

        for handler in self._handlers:
            if self._root_logger:
                self._root_logger.removeHandler(handler)
            handler.flush()
            handler.close()

        self._handlers = []
        self._initialized = False

    def status(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "level": logging.getLevelName(self._level),
            "format": self._format,
            "file": str(self._file_path) if self._file_path else None,
        }


def get_logger(name: str) -> Any:
    """Return a structlog logger for ``name``."""
    return structlog.get_logger(name)
