"""
Observability: structured logging and Prometheus metrics.
"""

from .logging_config import TraceIDFilter, get_logger, setup_logging
from .metrics import init_metrics, start_metrics_server

__all__ = [
    "TraceIDFilter",
    "get_logger",
    "setup_logging",
    "init_metrics",
    "start_metrics_server",
]
