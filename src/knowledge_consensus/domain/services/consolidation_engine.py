"""
Consolidation Engine
====================

Fans a knowledge query out to every registered source, weights each
answer by the source's domain-aware reliability and folds the answers
into one verdict.

Resilience contract:
1. Every source is probed and queried independently and concurrently
2. A source that is unavailable, disabled or raises is recorded in
   ``unavailable_sources``; the others are still consolidated
3. With no answers at all a conservative zero-confidence result is returned
4. Nothing a source does propagates to the caller; only a malformed
   query raises
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from knowledge_consensus.domain.entities import (
    FALLBACK_EVIDENCE_MESSAGE,
    ConsolidatedResult,
    KnowledgeQuery,
    ReliabilityConfig,
    SourceResult,
)
from knowledge_consensus.domain.errors import SourceQueryError
from knowledge_consensus.domain.services.fast_path import FastPathSelector
from knowledge_consensus.domain.services.guards import probe_availability, validate_query
from knowledge_consensus.domain.services.reliability_registry import (
    SourceRegistration,
    SourceReliabilityRegistry,
)
from knowledge_consensus.domain.services.result_shaping import (
    deduplicate_sources,
    elapsed_ms_since,
    round_half_up,
    unique_in_order,
)

if TYPE_CHECKING:
    from knowledge_consensus.domain.entities import Domain, FeedbackPolarity
    from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter

logger = logging.getLogger(__name__)


class ConsolidationEngine:
    """
    Multi-source knowledge consolidation.

    Entry points:
    - ``query_all``: correctness first, every source, weighted fusion
    - ``query_best``: latency first, sequential fast path with
      ``query_all`` as backstop
    """

    def __init__(
        self,
        registry: SourceReliabilityRegistry | None = None,
        *,
        fallback_enabled: bool = True,
    ) -> None:
        """
        Initialize the engine.

        Args:
            registry: Reliability registry, shared by reference. A fresh
                empty registry is created when omitted.
            fallback_enabled: Whether a no-sources result carries the
                synthetic fallback evidence message.
        """
        self._registry = registry if registry is not None else SourceReliabilityRegistry()
        self._fallback_enabled = fallback_enabled
        self._fast_path = FastPathSelector(self._registry, fallback=self.query_all)

    @property
    def registry(self) -> SourceReliabilityRegistry:
        return self._registry

    @property
    def fallback_enabled(self) -> bool:
        return self._fallback_enabled

    def set_fallback_enabled(self, enabled: bool) -> None:
        """Toggle the synthetic evidence message on no-sources results."""
        self._fallback_enabled = enabled

    # ------------------------------------------------------------------
    # Registry pass-throughs
    # ------------------------------------------------------------------

    def register(
        self,
        adapter: KnowledgeSourceAdapter,
        config: ReliabilityConfig | None = None,
    ) -> ReliabilityConfig:
        """Register a knowledge source (see SourceReliabilityRegistry.register)."""
        return self._registry.register(adapter, config)

    def deregister(self, name: str) -> None:
        """Remove a knowledge source."""
        self._registry.deregister(name)

    def update_from_feedback(
        self,
        name: str,
        polarity: FeedbackPolarity | str,
        domain: Domain | str | None = None,
    ) -> ReliabilityConfig | None:
        """Apply one feedback step to a source's weight."""
        return self._registry.update_from_feedback(name, polarity, domain)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    async def query_all(self, query: KnowledgeQuery) -> ConsolidatedResult:
        """
        Query every registered source concurrently and fuse the answers.

        Args:
            query: The verification request.

        Returns:
            Consolidated verdict, or the conservative fallback when no
            source answered.

        Raises:
            InvalidQueryError: If the query is malformed.
        """
        validate_query(query)
        start_time = time.perf_counter()

        # Registrations and configs are read once; mutations during the
        # call do not affect it.
        registrations = self._registry.registrations()
        outcomes = await asyncio.gather(
            *(self._collect(registration, query) for registration in registrations)
        )

        answered: list[tuple[SourceRegistration, SourceResult]] = []
        unavailable: list[str] = []
        for registration, outcome in zip(registrations, outcomes, strict=True):
            if outcome is None:
                unavailable.append(registration.name)
            else:
                answered.append((registration, outcome))

        if not answered:
            logger.info(
                f"No knowledge source answered ({len(unavailable)} unavailable), "
                f"fallback={'on' if self._fallback_enabled else 'off'}"
            )
            return self._no_sources_result(start_time, unavailable)

        result = self._consolidate(answered, query, start_time, unavailable)
        logger.debug(
            f"Consolidated {len(answered)} source(s): "
            f"confidence={result.overall_confidence}, supported={result.is_supported}, "
            f"unavailable={unavailable}"
        )
        return result

    async def query_best(self, query: KnowledgeQuery) -> ConsolidatedResult:
        """
        Ask the most reliable sources first and stop at a confident answer.

        Falls back to ``query_all`` when no source clears the threshold.

        Raises:
            InvalidQueryError: If the query is malformed.
        """
        return await self._fast_path.select(query)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _collect(
        self,
        registration: SourceRegistration,
        query: KnowledgeQuery,
    ) -> SourceResult | None:
        """Probe and query one source; None means it did not answer."""
        adapter = registration.adapter
        if not registration.config.enabled:
            logger.debug(f"Source {adapter.name} is disabled, skipping")
            return None

        if not await probe_availability(adapter):
            return None

        try:
            return await adapter.query(query)
        except Exception as e:
            error = SourceQueryError(adapter.name, str(e))
            logger.warning(f"Source {error}")
            return None

    def _consolidate(
        self,
        answered: list[tuple[SourceRegistration, SourceResult]],
        query: KnowledgeQuery,
        start_time: float,
        unavailable: list[str],
    ) -> ConsolidatedResult:
        """Weighted fusion of the answering sources."""
        weights: dict[str, float] = {}
        weighted_confidence = 0.0
        total_weight = 0.0
        supporting_weight = 0.0

        for registration, result in answered:
            weight = registration.config.weight_for(query.domain)
            weights[registration.name] = weight
            weighted_confidence += result.confidence * weight
            total_weight += weight
            if result.is_supported:
                supporting_weight += weight

        overall_confidence = (
            round_half_up(weighted_confidence / total_weight) if total_weight > 0 else 0
        )

        return ConsolidatedResult(
            sources=deduplicate_sources(
                source for _, result in answered for source in result.sources
            ),
            overall_confidence=overall_confidence,
            # Strict majority: an exact tie is not support.
            is_supported=supporting_weight > total_weight / 2,
            evidence=unique_in_order(item for _, result in answered for item in result.evidence),
            contradictions=unique_in_order(
                item for _, result in answered for item in result.contradictions
            ),
            source_reliability_weights=weights,
            query_time_ms=elapsed_ms_since(start_time),
            available_sources=[registration.name for registration, _ in answered],
            unavailable_sources=unavailable,
        )

    def _no_sources_result(
        self,
        start_time: float,
        unavailable: list[str],
    ) -> ConsolidatedResult:
        """Conservative result when no source answered."""
        return ConsolidatedResult(
            sources=[],
            overall_confidence=0,
            is_supported=False,
            evidence=[FALLBACK_EVIDENCE_MESSAGE] if self._fallback_enabled else [],
            contradictions=[],
            source_reliability_weights={},
            query_time_ms=elapsed_ms_since(start_time),
            available_sources=[],
            unavailable_sources=unavailable,
        )
