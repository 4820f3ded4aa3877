"""Outbound adapters for external services."""

from knowledge_consensus.adapters.outbound.knowledge_sources import (
    GovernmentDataAdapter,
    HTTPKnowledgeSource,
    KnowledgeSourceError,
    WikipediaAdapter,
)
from knowledge_consensus.adapters.outbound.reliability_memory import (
    InMemoryReliabilityStore,
)

__all__ = [
    # Knowledge sources
    "GovernmentDataAdapter",
    "HTTPKnowledgeSource",
    "KnowledgeSourceError",
    "WikipediaAdapter",
    # Reliability stores
    "InMemoryReliabilityStore",
]
