"""
Domain Layer
============

Core business entities, errors and consolidation services.
These are persistence-agnostic and contain no infrastructure dependencies.
"""

from knowledge_consensus.domain.entities import (
    FALLBACK_EVIDENCE_MESSAGE,
    ConsolidatedResult,
    Domain,
    FeedbackPolarity,
    KnowledgeQuery,
    ReliabilityConfig,
    Source,
    SourceCategory,
    SourceResult,
)
from knowledge_consensus.domain.errors import (
    InvalidQueryError,
    KnowledgeConsensusError,
    SourceQueryError,
    SourceUnavailableError,
)

__all__ = [
    # Entities
    "ConsolidatedResult",
    "Domain",
    "FALLBACK_EVIDENCE_MESSAGE",
    "FeedbackPolarity",
    "KnowledgeQuery",
    "ReliabilityConfig",
    "Source",
    "SourceCategory",
    "SourceResult",
    # Errors
    "InvalidQueryError",
    "KnowledgeConsensusError",
    "SourceQueryError",
    "SourceUnavailableError",
]
