"""
Structured logging configuration for actionstore.

Provides JSON-formatted logs with trace_id support. The dispatcher uses the
action call id as trace_id, so every record of one call can be correlated.

The library only emits records; handlers are installed by setup_logging(),
which the CLI calls and applications may call.

Environment Variables:
    ACTIONSTORE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    ACTIONSTORE_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from actionstore.observability.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, trace_id="call-7", action="increment")
    logger.info("Action settled")
"""

import logging
import os
import sys
from typing import Any, Optional, TextIO

from pythonjsonlogger.json import JsonFormatter


class TraceIDFilter(logging.Filter):
    """
    Logging filter that adds trace_id to all log records.

    Ensures all logs have a trace_id field, even if not set via LoggerAdapter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = "N/A"  # type: ignore
        return True


def setup_logging(stream: Optional[TextIO] = None) -> None:
    """
    Configure root logger with structured logging.

    Reads configuration from environment variables:
    - ACTIONSTORE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - ACTIONSTORE_LOG_FORMAT: json, text (default: json)

    Args:
        stream: Output stream (default: stdout)
    """
    log_level = os.getenv("ACTIONSTORE_LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("ACTIONSTORE_LOG_FORMAT", "json").lower()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    level = level_map.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    # Filter on the handler, not the root logger: logger filters are skipped
    # for records propagated from child loggers.
    handler.addFilter(TraceIDFilter())

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [trace_id=%(trace_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str, trace_id: Optional[str] = None, **fields: Any) -> logging.LoggerAdapter:
    """
    Get a logger with optional trace_id for correlation.

    LoggerAdapter replaces (rather than merges) a per-call extra= argument,
    so structured fields are bound here instead.

    Args:
        name: Logger name (typically __name__)
        trace_id: Trace ID for correlating logs (typically the action call id)
        **fields: Extra structured fields attached to every record

    Returns:
        LoggerAdapter with trace_id and fields in extra
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"trace_id": trace_id or "N/A", **fields})
