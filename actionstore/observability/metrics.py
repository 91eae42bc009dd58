"""
Prometheus metrics for actionstore.

Exposes action execution metrics via an HTTP /metrics endpoint.

Environment Variables (read through StoreConfig):
    ACTIONSTORE_METRICS_ENABLED: Enable metrics server (1/0) - default: 0
    ACTIONSTORE_METRICS_PORT: HTTP port for /metrics endpoint - default: 8080

Usage:
    from actionstore.observability.metrics import start_metrics_server, track_action

    start_metrics_server(enabled=True, port=8080)
    track_action("increment", "ok")

Tracking helpers are no-ops until init_metrics() has run, so the engine can
call them unconditionally.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger(__name__)

ACTIONS_TOTAL: Optional[Counter] = None
COMMITS_TOTAL: Optional[Counter] = None
ACTION_DURATION: Optional[Histogram] = None
QUEUE_DEPTH: Optional[Gauge] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Initialize Prometheus metrics (safe to call more than once).

    Metrics are registered on the default prometheus_client registry.
    """
    global ACTIONS_TOTAL, COMMITS_TOTAL, ACTION_DURATION, QUEUE_DEPTH
    global _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # Settled action calls (labels: action, outcome=ok|error)
        ACTIONS_TOTAL = Counter(
            "actionstore_actions_total",
            "Total number of settled action calls",
            labelnames=["action", "outcome"],
        )

        COMMITS_TOTAL = Counter(
            "actionstore_commits_total",
            "Total number of state commits",
            labelnames=["action"],
        )

        ACTION_DURATION = Histogram(
            "actionstore_action_duration_seconds",
            "Time from promotion to settlement of an action call",
            labelnames=["action"],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0),
        )

        # Calls waiting or active in the execution queue
        QUEUE_DEPTH = Gauge(
            "actionstore_queue_depth",
            "Number of action calls waiting or active",
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start Prometheus metrics HTTP server in background thread.

    Args:
        enabled: Whether to start metrics server
        port: HTTP port for /metrics endpoint
    """
    if not enabled:
        logger.info("Metrics server disabled (ACTIONSTORE_METRICS_ENABLED=0)")
        return

    init_metrics()

    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")


@contextmanager
def track_action_duration(action: str) -> Generator[None, None, None]:
    """
    Context manager timing one action call.

    Usage:
        with track_action_duration("increment"):
            await run_call()
    """
    if ACTION_DURATION is None:
        yield
        return

    with ACTION_DURATION.labels(action=action).time():
        yield


def track_action(action: str, outcome: str) -> None:
    """Count a settled call (outcome: "ok" or "error")."""
    if ACTIONS_TOTAL is not None:
        ACTIONS_TOTAL.labels(action=action, outcome=outcome).inc()


def track_commit(action: str) -> None:
    if COMMITS_TOTAL is not None:
        COMMITS_TOTAL.labels(action=action).inc()


def set_queue_depth(depth: int) -> None:
    if QUEUE_DEPTH is not None:
        QUEUE_DEPTH.set(depth)
