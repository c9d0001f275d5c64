"""Logging helpers for the provisioning tools."""

from __future__ import annotations

import logging

DEFAULT_LOG_FILE = "/tmp/raspi_provisioning.log"
LOG_FORMAT = "%(asctime)s %(message)s"


class LoggingManager:
    """Manage provisioning logging configuration and leveled messages."""

    def __init__(self, logger_name: str = "raspi_provisioning") -> None:
        self.logger = logging.getLogger(logger_name)
        self.logger.propagate = False

    @staticmethod
    def _open_log_file(log_file: str | None) -> logging.Handler | None:
        if not log_file:
            return None
        try:
            return logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError:
            return None

    def setup(self, verbose: bool, log_file: str | None = DEFAULT_LOG_FILE) -> None:
        """Send records to the console and, when it can be opened, to log_file."""
        formatter = logging.Formatter(LOG_FORMAT)
        handlers = [logging.StreamHandler(), self._open_log_file(log_file)]

        self.logger.handlers.clear()
        for handler in filter(None, handlers):
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        self.logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    def log(self, msg: str) -> None:
        """Log an unprefixed informational message."""
        self.logger.info(msg)

    def debug(self, msg: str, *args: object) -> None:
        """Log a debug message, accepting %-style args like the stdlib logger."""
        self.logger.debug(f"[DEBUG] {msg}", *args)

    def info(self, msg: str) -> None:
        self.logger.info(f"[INFO] {msg}")

    def success(self, msg: str) -> None:
        self.logger.info(f"[SUCCESS] {msg}")

    def warning(self, msg: str) -> None:
        self.logger.warning(f"[WARNING] {msg}")

    def error(self, msg: str) -> None:
        self.logger.error(f"[ERROR] {msg}")


DEFAULT_LOGGER = LoggingManager()
