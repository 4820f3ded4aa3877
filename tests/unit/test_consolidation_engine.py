"""
Tests for Consolidation Engine
==============================
"""

from __future__ import annotations

import asyncio

import pytest

from knowledge_consensus.domain.entities import (
    FALLBACK_EVIDENCE_MESSAGE,
    Domain,
    KnowledgeQuery,
    ReliabilityConfig,
    Source,
    SourceCategory,
    SourceResult,
)
from knowledge_consensus.domain.errors import InvalidQueryError
from knowledge_consensus.domain.services.consolidation_engine import ConsolidationEngine
from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter


def _config(name: str, weight: float, **domain_weights: float) -> ReliabilityConfig:
    return ReliabilityConfig(
        source_name=name,
        base_weight=weight,
        domain_weights={Domain(key): value for key, value in domain_weights.items()},
    )


class TestQueryAll:
    """Tests for full consolidation."""

    @pytest.mark.asyncio
    async def test_weighted_mean_and_tie_is_not_support(
        self, make_source, sample_query, supporting_result, refuting_result
    ) -> None:
        engine = ConsolidationEngine()
        engine.register(make_source("A", result=supporting_result), _config("A", 0.5))
        engine.register(make_source("B", result=refuting_result), _config("B", 0.5))

        result = await engine.query_all(sample_query)

        assert result.overall_confidence == 65
        assert result.is_supported is False
        assert result.source_reliability_weights == {"A": 0.5, "B": 0.5}
        assert result.available_sources == ["A", "B"]
        assert result.unavailable_sources == []

    @pytest.mark.asyncio
    async def test_weighted_majority_supports(
        self, make_source, sample_query, supporting_result, refuting_result
    ) -> None:
        engine = ConsolidationEngine()
        engine.register(make_source("A", result=supporting_result), _config("A", 0.75))
        engine.register(make_source("B", result=refuting_result), _config("B", 0.25))

        result = await engine.query_all(sample_query)

        # (80 * 0.75 + 50 * 0.25) / 1.0 = 72.5
        assert result.overall_confidence == 73
        assert result.is_supported is True

    @pytest.mark.asyncio
    async def test_trusted_source_outweighs_weak_dissent(self, make_source, sample_query) -> None:
        engine = ConsolidationEngine()
        engine.register(
            make_source("A", result=SourceResult(is_supported=True, confidence=80.0)),
            _config("A", 0.9),
        )
        engine.register(
            make_source("B", result=SourceResult(is_supported=False, confidence=20.0)),
            _config("B", 0.3),
        )

        result = await engine.query_all(sample_query)

        # (80 * 0.9 + 20 * 0.3) / 1.2 = 65
        assert result.overall_confidence == 65
        assert result.is_supported is True
        assert result.source_reliability_weights == {"A": 0.9, "B": 0.3}

    @pytest.mark.asyncio
    async def test_domain_weights_are_used(
        self, make_source, supporting_result, refuting_result
    ) -> None:
        engine = ConsolidationEngine()
        engine.register(
            make_source("A", result=supporting_result), _config("A", 0.9, legal=0.1)
        )
        engine.register(make_source("B", result=refuting_result), _config("B", 0.5))

        result = await engine.query_all(KnowledgeQuery(statement="x", domain=Domain.LEGAL))

        assert result.source_reliability_weights == {"A": 0.1, "B": 0.5}
        assert result.is_supported is False
        # (80 * 0.1 + 50 * 0.5) / 0.6 = 55
        assert result.overall_confidence == 55

    @pytest.mark.asyncio
    async def test_evidence_and_sources_deduplicated(self, make_source, sample_query) -> None:
        shared = Source(
            name="Wikipedia", title="Aspirin", category=SourceCategory.ENCYCLOPEDIA, url="u1"
        )
        duplicate = Source(
            name="Mirror", title="Aspirin copy", category=SourceCategory.ENCYCLOPEDIA, url="u1"
        )
        first = SourceResult(
            confidence=60.0,
            evidence=["e1", "e2"],
            contradictions=["c1"],
            sources=[shared],
        )
        second = SourceResult(
            confidence=60.0,
            evidence=["e2", "e3"],
            contradictions=["c1", "c2"],
            sources=[duplicate],
        )
        engine = ConsolidationEngine()
        engine.register(make_source("A", result=first))
        engine.register(make_source("B", result=second))

        result = await engine.query_all(sample_query)

        assert result.evidence == ["e1", "e2", "e3"]
        assert result.contradictions == ["c1", "c2"]
        assert result.sources == [shared]

    @pytest.mark.asyncio
    async def test_failing_sources_are_isolated(
        self, make_source, sample_query, supporting_result
    ) -> None:
        engine = ConsolidationEngine()
        engine.register(make_source("raises", query_error=RuntimeError("boom")))
        engine.register(make_source("ok", result=supporting_result))
        engine.register(make_source("down", available=False))
        engine.register(make_source("probe", availability_error=ConnectionError("no route")))

        result = await engine.query_all(sample_query)

        assert result.available_sources == ["ok"]
        assert result.unavailable_sources == ["raises", "down", "probe"]
        assert result.overall_confidence == 80
        assert result.is_supported is True
        assert list(result.source_reliability_weights) == ["ok"]

    @pytest.mark.asyncio
    async def test_unavailable_source_is_not_queried(self, make_source, sample_query) -> None:
        down = make_source("down", available=False)
        engine = ConsolidationEngine()
        engine.register(down)

        await engine.query_all(sample_query)

        assert down.availability_calls == 1
        assert down.query_calls == []

    @pytest.mark.asyncio
    async def test_no_sources_gives_fallback(self, sample_query) -> None:
        result = await ConsolidationEngine().query_all(sample_query)

        assert result.overall_confidence == 0
        assert result.is_supported is False
        assert result.evidence == [FALLBACK_EVIDENCE_MESSAGE]
        assert result.sources == []
        assert result.source_reliability_weights == {}
        assert result.available_sources == []
        assert result.unavailable_sources == []
        assert result.query_time_ms >= 1
        assert result.is_fallback is True

    @pytest.mark.asyncio
    async def test_all_unavailable_without_fallback_message(self, make_source, sample_query) -> None:
        engine = ConsolidationEngine(fallback_enabled=False)
        engine.register(make_source("A", available=False))
        engine.register(make_source("B", query_error=TimeoutError()))

        result = await engine.query_all(sample_query)

        assert result.evidence == []
        assert result.overall_confidence == 0
        assert result.unavailable_sources == ["A", "B"]

    @pytest.mark.asyncio
    async def test_toggle_fallback(self, sample_query) -> None:
        engine = ConsolidationEngine()
        engine.set_fallback_enabled(False)

        result = await engine.query_all(sample_query)

        assert engine.fallback_enabled is False
        assert result.evidence == []

    @pytest.mark.asyncio
    async def test_disabled_source_is_skipped(
        self, make_source, sample_query, supporting_result
    ) -> None:
        disabled = make_source("off", result=supporting_result)
        engine = ConsolidationEngine()
        engine.register(disabled)
        engine.registry.set_enabled("off", False)

        result = await engine.query_all(sample_query)

        assert disabled.query_calls == []
        assert result.unavailable_sources == ["off"]

    @pytest.mark.asyncio
    async def test_zero_total_weight(self, make_source, sample_query, supporting_result) -> None:
        engine = ConsolidationEngine()
        engine.register(make_source("A", result=supporting_result), _config("A", 0.0))

        result = await engine.query_all(sample_query)

        assert result.overall_confidence == 0
        assert result.is_supported is False
        assert result.available_sources == ["A"]

    @pytest.mark.asyncio
    async def test_query_time_is_at_least_one(
        self, make_source, sample_query, supporting_result
    ) -> None:
        engine = ConsolidationEngine()
        engine.register(make_source("A", result=supporting_result))

        result = await engine.query_all(sample_query)

        assert result.query_time_ms >= 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("statement", ["", "   "])
    async def test_blank_statement_rejected(self, make_source, statement: str) -> None:
        source = make_source("A")
        engine = ConsolidationEngine()
        engine.register(source)

        with pytest.raises(InvalidQueryError):
            await engine.query_all(KnowledgeQuery(statement=statement))
        assert source.availability_calls == 0

    @pytest.mark.asyncio
    async def test_non_query_rejected(self) -> None:
        with pytest.raises(InvalidQueryError):
            await ConsolidationEngine().query_all("not a query")  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_feedback_passthrough_changes_next_call(
        self, make_source, sample_query, supporting_result
    ) -> None:
        engine = ConsolidationEngine()
        engine.register(make_source("A", credibility=50.0, result=supporting_result))

        engine.update_from_feedback("A", "positive")
        result = await engine.query_all(sample_query)

        assert result.source_reliability_weights["A"] == pytest.approx(0.55)

    @pytest.mark.asyncio
    async def test_deregistered_source_not_queried(
        self, make_source, sample_query, supporting_result
    ) -> None:
        source = make_source("A", result=supporting_result)
        engine = ConsolidationEngine()
        engine.register(source)
        engine.deregister("A")

        result = await engine.query_all(sample_query)

        assert source.query_calls == []
        assert result.is_fallback is True

    @pytest.mark.asyncio
    async def test_shared_registry(self, make_source, sample_query, supporting_result) -> None:
        engine = ConsolidationEngine()
        engine.registry.register(make_source("A", result=supporting_result))

        result = await engine.query_all(sample_query)

        assert result.available_sources == ["A"]


class GatedSource(KnowledgeSourceAdapter):
    """Answers only once its gate event is set."""

    def __init__(
        self,
        name: str,
        result: SourceResult,
        gate: asyncio.Event,
        *,
        started: asyncio.Event | None = None,
        credibility: float = 50.0,
    ) -> None:
        self._name = name
        self._result = result
        self._gate = gate
        self.started = started or asyncio.Event()
        self._credibility = credibility

    @property
    def name(self) -> str:
        return self._name

    @property
    def raw_credibility(self) -> float:
        return self._credibility

    async def is_available(self) -> bool:
        return True

    async def query(self, query: KnowledgeQuery) -> SourceResult:
        self.started.set()
        await self._gate.wait()
        return self._result


class TestConcurrency:
    """Tests for fan-out and registry isolation of in-flight calls."""

    @pytest.mark.asyncio
    async def test_sources_are_queried_concurrently(
        self, sample_query, supporting_result
    ) -> None:
        a_started, b_started = asyncio.Event(), asyncio.Event()
        engine = ConsolidationEngine()
        # Each source answers only after the other was queried.
        engine.register(GatedSource("A", supporting_result, b_started, started=a_started))
        engine.register(GatedSource("B", supporting_result, a_started, started=b_started))

        result = await asyncio.wait_for(engine.query_all(sample_query), timeout=2)

        assert result.available_sources == ["A", "B"]

    @pytest.mark.asyncio
    async def test_registry_changes_do_not_affect_in_flight_call(
        self, make_source, sample_query, supporting_result
    ) -> None:
        release = asyncio.Event()
        slow = GatedSource("A", supporting_result, release)
        late = make_source("B", result=supporting_result)
        engine = ConsolidationEngine()
        engine.register(slow)

        task = asyncio.create_task(engine.query_all(sample_query))
        await asyncio.wait_for(slow.started.wait(), timeout=2)

        engine.update_from_feedback("A", "positive")
        engine.register(late)
        release.set()
        result = await asyncio.wait_for(task, timeout=2)

        assert result.source_reliability_weights == {"A": 0.5}
        assert result.available_sources == ["A"]
        assert late.query_calls == []
        assert engine.registry.weight_for("A") == pytest.approx(0.55)


class NarrowSource(GatedSource):
    """Declares a single covered domain."""

    @property
    def supported_domains(self) -> tuple[Domain, ...]:
        return (Domain.HEALTHCARE,)


class TestSupportedDomains:
    """Declared domain coverage does not filter sources."""

    @pytest.mark.asyncio
    async def test_source_outside_declared_domains_is_still_queried(
        self, supporting_result
    ) -> None:
        gate = asyncio.Event()
        gate.set()
        engine = ConsolidationEngine()
        engine.register(NarrowSource("A", supporting_result, gate))

        result = await engine.query_all(KnowledgeQuery(statement="x", domain=Domain.LEGAL))

        assert result.available_sources == ["A"]
        assert result.is_supported is True
