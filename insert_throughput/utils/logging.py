"""
Structured logging utilities for the Insert Throughput benchmark.

Centralizes logging configuration to keep the CLI, orchestrator, and strategies
consistent. It favors standard library logging with a human-readable formatter
by default and an optional JSON formatter for structured logs (useful for
pipelines/CI). The ORM layer gets its own logger configuration so that
SQLAlchemy chatter can be held at error level independently of the app.

Usage:
    from insert_throughput.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False)
    log = get_logger(__name__)
    log.info("message", extra={"rows": 1000})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

from rich.logging import RichHandler

ORM_LOGGER_NAME = "sqlalchemy"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in vars(record).items():
        if key in _RESERVED_ATTRS or key == "extra":
            continue
        payload[key] = value
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    # Legacy callers pass a nested dict as `extra={"extra": {...}}`.
    if hasattr(record, "extra") and isinstance(record.extra, dict):
        payload.update(record.extra)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Whether to emit logs as JSON. If False, uses a concise human formatter.
    """
    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level,
                }
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )


def configure_orm_logging(level: str = "ERROR", colorful: bool = False) -> logging.Logger:
    """
    Configure the SQLAlchemy logger hierarchy.

    Parameters
    ----------
    level : str
        Threshold for ORM log records; "ERROR" keeps only failures.
    colorful : bool
        Route ORM records through a dedicated `RichHandler` instead of
        propagating them to the plain root handler.
    """
    logger = logging.getLogger(ORM_LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    if colorful:
        logger.addHandler(RichHandler(level=level, show_path=False))
        logger.propagate = False
    else:
        logger.propagate = True
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name. If name is None, returns the root logger.
    """
    return logging.getLogger(name)


__all__ = ["configure_logging", "configure_orm_logging", "get_logger", "JsonFormatter"]
