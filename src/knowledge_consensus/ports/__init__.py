"""
Ports Layer (Hexagonal Architecture)
====================================

Abstract interfaces defining the contracts between the consolidation
core and external systems.

Secondary Ports (driven):
- KnowledgeSourceAdapter: Statement -> per-source verdict
- ReliabilityStore: Reliability configuration persistence
"""

from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter
from knowledge_consensus.ports.reliability_store import ReliabilityStore

__all__ = [
    "KnowledgeSourceAdapter",
    "ReliabilityStore",
]
