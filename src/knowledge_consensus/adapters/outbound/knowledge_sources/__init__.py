"""
External Knowledge Source Adapters
==================================

HTTP-based adapters for external knowledge APIs.

- Reference encyclopedia: Wikipedia (MediaWiki Action API)
- Authoritative registry: data.gov dataset catalog (CKAN)
"""

from knowledge_consensus.adapters.outbound.knowledge_sources.base import (
    HTTPKnowledgeSource,
    KnowledgeSourceError,
)
from knowledge_consensus.adapters.outbound.knowledge_sources.government import (
    GovernmentDataAdapter,
)
from knowledge_consensus.adapters.outbound.knowledge_sources.wikipedia import (
    WikipediaAdapter,
)

__all__ = [
    # Base
    "HTTPKnowledgeSource",
    "KnowledgeSourceError",
    "GovernmentDataAdapter",
    "WikipediaAdapter",
]
