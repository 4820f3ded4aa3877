"""
Source Call Guards
==================

Query validation and fault-isolating wrappers around adapter calls,
shared by the full consolidation and the fast path.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from knowledge_consensus.domain.entities import KnowledgeQuery
from knowledge_consensus.domain.errors import InvalidQueryError, SourceUnavailableError

if TYPE_CHECKING:
    from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter

logger = logging.getLogger(__name__)


def validate_query(query: object) -> KnowledgeQuery:
    """
    Fail fast on a malformed query, before any source is contacted.

    Raises:
        InvalidQueryError: If ``query`` is not a KnowledgeQuery or its
            statement is blank.
    """
    if not isinstance(query, KnowledgeQuery):
        raise InvalidQueryError(
            f"Expected KnowledgeQuery, got {type(query).__name__}"
        )
    if not query.statement or not query.statement.strip():
        raise InvalidQueryError("Query statement must not be blank")
    return query


async def probe_availability(adapter: KnowledgeSourceAdapter) -> bool:
    """Availability check that reports any fault as unavailable."""
    try:
        available = bool(await adapter.is_available())
    except Exception as e:
        error = SourceUnavailableError(adapter.name, f"availability check failed: {e}")
        logger.warning(f"Source {error}")
        return False

    if not available:
        logger.debug(f"Source {adapter.name} reported unavailable")
    return available
