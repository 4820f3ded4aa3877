"""
Fast-Path Selector
==================

Latency/cost-optimized alternative to full consolidation.

Sources are asked one at a time, most reliable first for the query's
domain. The first answer with confidence above the threshold is
returned on its own; lower-trust sources are never contacted. When no
source clears the threshold the full consolidation runs as a backstop.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from knowledge_consensus.domain.entities import ConsolidatedResult, KnowledgeQuery
from knowledge_consensus.domain.errors import SourceQueryError
from knowledge_consensus.domain.services.guards import probe_availability, validate_query
from knowledge_consensus.domain.services.result_shaping import (
    deduplicate_sources,
    elapsed_ms_since,
    round_half_up,
    unique_in_order,
)

if TYPE_CHECKING:
    from knowledge_consensus.domain.entities import SourceResult
    from knowledge_consensus.domain.services.reliability_registry import (
        SourceReliabilityRegistry,
    )

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 70

# The winning source is reported as fully trusted, whatever its configured
# weight. Downstream consumers rely on this shape.
WINNER_WEIGHT = 1.0


class FastPathSelector:
    """
    Sequential, reliability-ordered source selection with early return.

    Unavailable sources are skipped without counting as failures.
    Sources that raise are logged and skipped.
    """

    def __init__(
        self,
        registry: SourceReliabilityRegistry,
        fallback: Callable[[KnowledgeQuery], Awaitable[ConsolidatedResult]],
    ) -> None:
        """
        Initialize the selector.

        Args:
            registry: Registry providing the reliability ordering.
            fallback: Full consolidation, run when no source is confident.
        """
        self._registry = registry
        self._fallback = fallback

    async def select(self, query: KnowledgeQuery) -> ConsolidatedResult:
        """
        Return the first confident answer, or the full consolidation.

        Raises:
            InvalidQueryError: If the query is malformed.
        """
        validate_query(query)
        start_time = time.perf_counter()

        for adapter in self._registry.sorted_by_reliability(query.domain):
            config = self._registry.get_config(adapter.name)
            if config is not None and not config.enabled:
                continue

            if not await probe_availability(adapter):
                continue

            try:
                result = await adapter.query(query)
            except Exception as e:
                error = SourceQueryError(adapter.name, str(e))
                logger.warning(f"Source {error}")
                continue

            if result.confidence > CONFIDENCE_THRESHOLD:
                logger.info(
                    f"Fast path answered by {adapter.name} "
                    f"(confidence={result.confidence:.0f})"
                )
                return self._single_source_result(adapter.name, result, start_time)

            logger.debug(
                f"{adapter.name} below fast-path threshold "
                f"(confidence={result.confidence:.0f} <= {CONFIDENCE_THRESHOLD})"
            )

        logger.info("No source cleared the fast-path threshold, consolidating all sources")
        return await self._fallback(query)

    @staticmethod
    def _single_source_result(
        source_name: str,
        result: SourceResult,
        start_time: float,
    ) -> ConsolidatedResult:
        return ConsolidatedResult(
            sources=deduplicate_sources(result.sources),
            overall_confidence=round_half_up(result.confidence),
            is_supported=result.is_supported,
            evidence=unique_in_order(result.evidence),
            contradictions=unique_in_order(result.contradictions),
            source_reliability_weights={source_name: WINNER_WEIGHT},
            query_time_ms=elapsed_ms_since(start_time),
            available_sources=[source_name],
            unavailable_sources=[],
        )
