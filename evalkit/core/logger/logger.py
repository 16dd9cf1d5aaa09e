"""
Logging Management Module

Configures the shared ``evalkit`` logger. Trackers, evaluators and exporters
all log through ``logging.getLogger(LOGGER_NAME)``; this module decides where
those records go.

Key Features:
    - Console output is always enabled (stdout)
    - Optional rotating file handler once a run directory is known
    - Reconfiguration replaces handlers instead of stacking duplicates
    - ``DEBUG=1`` environment override for verbose diagnostics
"""

# Standard Imports
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Final, Optional

# Internal Imports
from ..paths import LOGGER_NAME


class Logger:
    """
    Owns handler configuration for a named logger.

    A logger name is configured once on first use (console-only). Passing a
    ``log_dir`` later reconfigures it with an additional rotating file handler,
    which is how a training run redirects metric logs into its own folder.

    Class Attributes:
        _configured_names (Dict[str, bool]): Logger names already configured
        _active_log_file (Optional[Path]): Most recent file handler target

    Example:
        >>> log = Logger.setup(name=LOGGER_NAME, log_dir=Path("./outputs/logs"))
        >>> log.info("Tracking started")
        >>> Logger.get_log_file()
        PosixPath('outputs/logs/evalkit_20260101_120000.log')
    """

    _configured_names: Final[Dict[str, bool]] = {}
    _active_log_file: Optional[Path] = None

    def __init__(
        self,
        name: str = LOGGER_NAME,
        log_dir: Optional[Path] = None,
        log_to_file: bool = True,
        level: int = logging.INFO,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 5,
    ):
        self.name = name
        self.log_dir = log_dir
        self.log_to_file = log_to_file and (log_dir is not None)
        self.level = level
        self.max_bytes = max_bytes
        self.backup_count = backup_count

        self.logger = logging.getLogger(name)

        if name not in Logger._configured_names or log_dir is not None:
            self._setup_logger()
            Logger._configured_names[name] = True

    def _setup_logger(self) -> None:
        """
        Installs handlers: console always, rotating file only with a log_dir.

        Existing handlers are closed and removed first so that repeated setup
        calls never duplicate output.
        """
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s",
            "%Y-%m-%d %H:%M:%S",
        )

        self.logger.setLevel(self.level)
        self.logger.propagate = False

        if self.logger.hasHandlers():
            for handler in self.logger.handlers[:]:
                handler.close()
                self.logger.removeHandler(handler)

        console_h = logging.StreamHandler(sys.stdout)
        console_h.setFormatter(formatter)
        self.logger.addHandler(console_h)

        if self.log_to_file and self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            filename = self.log_dir / f"{self.name}_{timestamp}.log"

            file_h = RotatingFileHandler(
                filename, maxBytes=self.max_bytes, backupCount=self.backup_count, encoding="utf-8"
            )
            file_h.setFormatter(formatter)
            self.logger.addHandler(file_h)

            Logger._active_log_file = filename

    def get_logger(self) -> logging.Logger:
        """Returns the underlying ``logging.Logger``."""
        return self.logger

    @classmethod
    def get_log_file(cls) -> Optional[Path]:
        """Returns the active log file path, or None when logging to console only."""
        return cls._active_log_file

    @classmethod
    def setup(
        cls, name: str = LOGGER_NAME, log_dir: Optional[Path] = None, level: str = "INFO", **kwargs
    ) -> logging.Logger:
        """
        Configures a logger from a textual level name.

        Args:
            name: Logger identifier (defaults to LOGGER_NAME)
            log_dir: Directory for rotating log files (None = console only)
            level: DEBUG, INFO, WARNING, ERROR or CRITICAL
            **kwargs: Forwarded to the Logger constructor

        Returns:
            The configured logging.Logger

        Environment Variables:
            DEBUG: "1" forces DEBUG level regardless of ``level``
        """
        if os.getenv("DEBUG") == "1":
            numeric_level = logging.DEBUG
        else:
            numeric_level = getattr(logging, level.upper(), logging.INFO)

        log = cls(name=name, log_dir=log_dir, level=numeric_level, **kwargs).get_logger()
        # Level applies even when the handlers are kept
        log.setLevel(numeric_level)
        return log


# Bootstrap instance (console only), reconfigured by Logger.setup()
logger: Final[logging.Logger] = Logger().get_logger()
