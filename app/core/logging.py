"""
Structured logging configuration using python-json-logger.
Cache and refresher events are logged through the same pipeline as requests.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from app.core.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps each record with service metadata."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = settings.PROJECT_NAME
        log_record["version"] = settings.VERSION
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def json_formatter() -> CustomJsonFormatter:
    """Formatter for production logs; timestamps are UTC ISO-8601."""
    return CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", timestamp=True)


def setup_logging() -> None:
    """
    Configure application-wide logging.
    Uses JSON format in production, a plain format when DEBUG is set.
    Safe to call more than once; the handler is installed only once.
    """
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(getattr(h, "_catalog_handler", False) for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler._catalog_handler = True  # type: ignore[attr-defined]

    if settings.DEBUG:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = json_formatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
