"""
Tests for Logging Utilities
===========================
"""

from __future__ import annotations

import logging

from knowledge_consensus.infrastructure.logging import HealthLiveAccessFilter


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("uvicorn.access", logging.INFO, __file__, 1, message, None, None)


class TestHealthLiveAccessFilter:
    """Tests for liveness access-log throttling."""

    def test_other_paths_always_pass(self) -> None:
        log_filter = HealthLiveAccessFilter(min_interval_seconds=3600.0)

        assert log_filter.filter(_record('"POST /api/v1/knowledge/query HTTP/1.1" 200'))
        assert log_filter.filter(_record('"POST /api/v1/knowledge/query HTTP/1.1" 200'))

    def test_liveness_throttled(self) -> None:
        log_filter = HealthLiveAccessFilter(min_interval_seconds=3600.0)

        assert log_filter.filter(_record('"GET /health/live HTTP/1.1" 200')) is True
        assert log_filter.filter(_record('"GET /health/live HTTP/1.1" 200')) is False

    def test_zero_interval_never_throttles(self) -> None:
        log_filter = HealthLiveAccessFilter(min_interval_seconds=0.0)

        assert log_filter.filter(_record('"GET /health/live HTTP/1.1" 200')) is True
        assert log_filter.filter(_record('"GET /health/live HTTP/1.1" 200')) is True
