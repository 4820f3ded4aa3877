"""
Reliability Store Port
======================

Persistence contract for source reliability configuration.
The registry itself lives in memory; durable storage is owned by
whatever implements this port.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from knowledge_consensus.domain.entities import ReliabilityConfig


class ReliabilityStore(ABC):
    """Port for loading and saving reliability configuration snapshots."""

    @abstractmethod
    async def load(self) -> list[ReliabilityConfig]:
        """
        Load the last saved snapshot.

        Returns:
            Saved configs, empty if nothing was saved yet.
        """
        ...

    @abstractmethod
    async def save(self, configs: list[ReliabilityConfig]) -> None:
        """Persist a full snapshot, replacing the previous one."""
        ...
