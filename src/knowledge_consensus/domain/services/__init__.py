"""
Domain Services
===============

Consolidation services built on the domain entities:
- SourceReliabilityRegistry: per-source trust weights and feedback
- ConsolidationEngine: concurrent fan-out and weighted fusion
- FastPathSelector: sequential early-return strategy
"""

from knowledge_consensus.domain.services.consolidation_engine import ConsolidationEngine
from knowledge_consensus.domain.services.fast_path import (
    CONFIDENCE_THRESHOLD,
    FastPathSelector,
)
from knowledge_consensus.domain.services.reliability_registry import (
    FEEDBACK_STEP,
    NEUTRAL_WEIGHT,
    SourceRegistration,
    SourceReliabilityRegistry,
)
from knowledge_consensus.domain.services.result_shaping import (
    deduplicate_sources,
    unique_in_order,
)

__all__ = [
    "CONFIDENCE_THRESHOLD",
    "ConsolidationEngine",
    "FEEDBACK_STEP",
    "FastPathSelector",
    "NEUTRAL_WEIGHT",
    "SourceRegistration",
    "SourceReliabilityRegistry",
    "deduplicate_sources",
    "unique_in_order",
]
