"""
KnowledgeVerificationService
============================

Primary application use-case: verify one statement against the
registered knowledge sources and manage source reliability feedback.

Flow:
1. Build a KnowledgeQuery from the caller's payload
2. Run the chosen strategy (full consolidation or fast path)
3. Return the consolidated verdict

Feedback updates the registry and, when a store is configured, saves
the new reliability snapshot.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import ValidationError

from knowledge_consensus.domain.entities import (
    ConsolidatedResult,
    Domain,
    FeedbackPolarity,
    KnowledgeQuery,
    ReliabilityConfig,
)
from knowledge_consensus.domain.errors import InvalidQueryError

if TYPE_CHECKING:
    from knowledge_consensus.domain.services.consolidation_engine import ConsolidationEngine
    from knowledge_consensus.ports.reliability_store import ReliabilityStore

logger = logging.getLogger(__name__)

Strategy = Literal["all", "best"]


class KnowledgeVerificationService:
    """
    Orchestrates statement verification through the consolidation engine.

    Only the engine and the optional ReliabilityStore port are used; no
    concrete infrastructure is injected here.
    """

    def __init__(
        self,
        engine: ConsolidationEngine,
        *,
        store: ReliabilityStore | None = None,
        default_strategy: Strategy = "all",
    ) -> None:
        """
        Initialize the use-case.

        Args:
            engine: Consolidation engine with its registry.
            store: Optional persistence for reliability snapshots.
            default_strategy: Strategy used when a call does not pick one.
        """
        self._engine = engine
        self._store = store
        self._default_strategy = default_strategy

    @property
    def engine(self) -> ConsolidationEngine:
        return self._engine

    async def verify(
        self,
        statement: str,
        *,
        domain: Domain | str | None = None,
        context: str | None = None,
        max_results: int | None = None,
        strategy: Strategy | None = None,
    ) -> ConsolidatedResult:
        """
        Verify a statement.

        Args:
            statement: Statement to verify.
            domain: Optional domain tag selecting domain-specific weights.
            context: Optional free-text context passed to the sources.
            max_results: Optional per-source result limit.
            strategy: "all" or "best"; defaults to the configured strategy.

        Returns:
            The consolidated verdict.

        Raises:
            InvalidQueryError: If the statement is blank or a field is out of range.
        """
        try:
            query = KnowledgeQuery(
                statement=statement,
                domain=domain,
                context=context,
                max_results=max_results,
            )
        except ValidationError as e:
            raise InvalidQueryError(f"Invalid knowledge query: {e}") from e
        chosen = strategy or self._default_strategy

        if chosen == "best":
            result = await self._engine.query_best(query)
        else:
            result = await self._engine.query_all(query)

        logger.info(
            f"Verified statement [{chosen}] domain={query.domain}: "
            f"confidence={result.overall_confidence}, supported={result.is_supported}, "
            f"sources={result.available_sources}, "
            f"time={result.query_time_ms:.1f}ms"
        )
        return result

    async def record_feedback(
        self,
        source_name: str,
        polarity: FeedbackPolarity | str,
        domain: Domain | str | None = None,
    ) -> ReliabilityConfig | None:
        """
        Apply reliability feedback for a source and persist the snapshot.

        Returns:
            The updated config, or None for an unknown source.
        """
        updated = self._engine.update_from_feedback(source_name, polarity, domain)
        if updated is not None and self._store is not None:
            await self._store.save(self._engine.registry.snapshot())
        return updated

    async def load_reliability(self) -> int:
        """
        Restore the registry from the configured store.

        Returns:
            Number of configs applied (0 without a store).
        """
        if self._store is None:
            return 0
        return self._engine.registry.restore(await self._store.load())

    def source_status(self) -> dict[str, ReliabilityConfig]:
        """Current reliability config of every registered source."""
        return {config.source_name: config for config in self._engine.registry.snapshot()}
