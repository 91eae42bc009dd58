"""
Store configuration from environment variables.

Environment Variables:
    ACTIONSTORE_LOGGING: Emit one log record per action call (1/0) - default: 0
    ACTIONSTORE_LOG_STATE: Include prev/next state in those records (1/0) - default: 0
    ACTIONSTORE_METRICS_ENABLED: Start Prometheus metrics server (1/0) - default: 0
    ACTIONSTORE_METRICS_PORT: Metrics server port - default: 8080
"""

import os
from dataclasses import dataclass


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    logging_enabled: bool = False
    log_state: bool = False
    metrics_enabled: bool = False
    metrics_port: int = 8080

    @staticmethod
    def from_env() -> "StoreConfig":
        return StoreConfig(
            logging_enabled=_flag("ACTIONSTORE_LOGGING"),
            log_state=_flag("ACTIONSTORE_LOG_STATE"),
            metrics_enabled=_flag("ACTIONSTORE_METRICS_ENABLED"),
            metrics_port=int(os.getenv("ACTIONSTORE_METRICS_PORT", "8080")),
        )
