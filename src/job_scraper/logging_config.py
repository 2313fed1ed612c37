"""Logging configuration with JSON output to stdout and file."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_ENVIRONMENT = "development"


def _resolve_environment() -> str:
    """Return ENVIRONMENT, defaulting to development when unset."""
    return os.getenv("ENVIRONMENT") or DEFAULT_ENVIRONMENT


# CRITICAL has no separate severity in the log sink
_SEVERITIES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARNING",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}


def _error_fields(formatter: logging.Formatter, exc_info: Any) -> Dict[str, Any]:
    exc_type, exc_value, exc_tb = exc_info
    return {
        "type": exc_type.__name__ if exc_type else "Exception",
        "message": str(exc_value),
        "stack": formatter.formatException(exc_info) if exc_tb else None,
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per log line.

    Scrape, version and session events logged through StructuredLogger keep
    their ``category``/``action``/``details`` fields; plain ``logger.info``
    calls are wrapped as ``category="system"``, ``action="log"``.
    """

    def __init__(self, environment: str = DEFAULT_ENVIRONMENT):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "severity": _SEVERITIES.get(record.levelno, "INFO"),
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "environment": self.environment,
            "service": "scraper",
            "logger": record.name,
        }

        fields = getattr(record, "structured_fields", None)
        if fields is not None:
            entry.update(fields)
        else:
            entry.update(category="system", action="log", message=record.getMessage())

        if record.exc_info:
            entry["error"] = _error_fields(self, record.exc_info)

        # details may hold datetimes or exceptions
        return json.dumps(entry, default=str)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging with JSON output to stdout and, optionally, a file.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None and LOG_FILE is unset, only stdout is used.

    Environment Variables:
        LOG_LEVEL: Override log level.
        LOG_FILE: Override log file path.
        ENVIRONMENT: Environment name (staging, production, development).
    """
    log_level = os.getenv("LOG_LEVEL", log_level).upper()
    log_file = os.getenv("LOG_FILE", log_file)
    environment = _resolve_environment()

    json_formatter = JSONFormatter(environment=environment)
    level = getattr(logging, log_level, logging.INFO)

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(json_formatter)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(json_formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    get_structured_logger(__name__).scrape_activity(
        "engine",
        "logging_configured",
        details={"environment": environment, "level": log_level, "file": log_file},
    )


class StructuredLogger:
    """Helper class for structured logging with JSON output."""

    def __init__(self, logger: logging.Logger):
        """
        Initialize structured logger.

        Args:
            logger: Base logger instance
        """
        self.logger = logger
        self.environment = _resolve_environment()

    def _log(self, level: str, structured_fields: Dict[str, Any]) -> None:
        log_method = getattr(self.logger, level.lower())
        message = structured_fields.get("message", "")
        log_method(message, extra={"structured_fields": structured_fields})

    def scrape_activity(
        self, source: str, action: str, details: Optional[Dict] = None, level: str = "info"
    ) -> None:
        """
        Log scraping activity.

        Args:
            source: Source being scraped
            action: Action being performed (started, completed, failed, ...)
            details: Optional additional details
            level: Log level to emit at
        """
        structured_fields = {
            "category": "scrape",
            "action": action,
            "message": f"Scraping {source}: {action}",
            "details": {"source": source, **(details or {})},
        }
        self._log(level, structured_fields)

    def version_change(self, source: str, old_version: str, new_version: str, reason: str) -> None:
        """
        Log a switch of the active parser version.

        Args:
            source: Source whose version changed
            old_version: Version active before the switch
            new_version: Version active after the switch
            reason: What triggered the switch (detected, fallback)
        """
        structured_fields = {
            "category": "scrape",
            "action": "version_changed",
            "message": f"{source} parser switched {old_version} -> {new_version} ({reason})",
            "details": {
                "source": source,
                "old_version": old_version,
                "new_version": new_version,
                "reason": reason,
            },
        }
        self._log("warning", structured_fields)

    def session_rotation(self, details: Optional[Dict] = None) -> None:
        """
        Log a session identity rotation.

        Args:
            details: Request count and session age at rotation time
        """
        structured_fields = {
            "category": "session",
            "action": "rotated",
            "message": "Session rotated",
            "details": details or {},
        }
        self._log("debug", structured_fields)


def get_structured_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.
    """
    return StructuredLogger(logging.getLogger(name))
