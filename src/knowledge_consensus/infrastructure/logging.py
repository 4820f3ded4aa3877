"""
Logging utilities for the service runtime.
"""

from __future__ import annotations

import logging
import time

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and quiet the noisy HTTP client loggers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class HealthLiveAccessFilter(logging.Filter):
    """Throttle /health/live access log entries to reduce log noise."""

    def __init__(self, min_interval_seconds: float = 120.0) -> None:
        super().__init__()
        self._min_interval_seconds = min_interval_seconds
        self._last_logged: float | None = None

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "/health/live" not in message:
            return True

        now = time.monotonic()
        if self._last_logged is None or (now - self._last_logged) >= self._min_interval_seconds:
            self._last_logged = now
            return True

        return False
