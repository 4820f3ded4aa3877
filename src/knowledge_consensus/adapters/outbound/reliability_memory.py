"""
In-Memory Reliability Store
===========================

Process-local ReliabilityStore. Keeps the last saved snapshot so a
registry can be rebuilt within the same process (tests, single-worker
deployments). Durable stores implement the same port.
"""

from __future__ import annotations

import asyncio
import logging

from knowledge_consensus.domain.entities import ReliabilityConfig
from knowledge_consensus.ports.reliability_store import ReliabilityStore

logger = logging.getLogger(__name__)


class InMemoryReliabilityStore(ReliabilityStore):
    """Reliability snapshots held in memory."""

    def __init__(self, initial: list[ReliabilityConfig] | None = None) -> None:
        self._configs: list[ReliabilityConfig] = list(initial or [])
        self._lock = asyncio.Lock()
        self.save_count = 0

    async def load(self) -> list[ReliabilityConfig]:
        async with self._lock:
            return list(self._configs)

    async def save(self, configs: list[ReliabilityConfig]) -> None:
        async with self._lock:
            self._configs = list(configs)
            self.save_count += 1
        logger.debug(f"Saved {len(configs)} reliability config(s)")
