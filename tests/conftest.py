"""
Pytest Fixtures
===============

Shared fixtures for all test modules.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from knowledge_consensus.domain.entities import (
    KnowledgeQuery,
    Source,
    SourceCategory,
    SourceResult,
)
from knowledge_consensus.ports.knowledge_source import KnowledgeSourceAdapter


class FakeKnowledgeSource(KnowledgeSourceAdapter):
    """Scriptable knowledge source for engine tests."""

    def __init__(
        self,
        name: str,
        *,
        credibility: float = 50.0,
        result: SourceResult | None = None,
        available: bool = True,
        query_error: Exception | None = None,
        availability_error: Exception | None = None,
    ) -> None:
        self._name = name
        self._credibility = credibility
        self.result = result or SourceResult()
        self.available = available
        self.query_error = query_error
        self.availability_error = availability_error
        self.query_calls: list[KnowledgeQuery] = []
        self.availability_calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def raw_credibility(self) -> float:
        return self._credibility

    async def is_available(self) -> bool:
        self.availability_calls += 1
        if self.availability_error is not None:
            raise self.availability_error
        return self.available

    async def query(self, query: KnowledgeQuery) -> SourceResult:
        self.query_calls.append(query)
        if self.query_error is not None:
            raise self.query_error
        return self.result


# -----------------------------------------------------------------------------
# Domain Entity Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def make_source() -> Callable[..., FakeKnowledgeSource]:
    """Factory for scriptable knowledge sources."""
    return FakeKnowledgeSource


@pytest.fixture
def sample_query() -> KnowledgeQuery:
    """A plain query without domain."""
    return KnowledgeQuery(statement="Aspirin reduces the risk of heart attack.")


@pytest.fixture
def encyclopedia_source() -> Source:
    """An encyclopedia article reference."""
    return Source(
        name="Wikipedia",
        title="Aspirin",
        category=SourceCategory.ENCYCLOPEDIA,
        url="https://en.wikipedia.org/wiki/Aspirin",
        last_verified=datetime(2024, 1, 1, tzinfo=UTC),
        credibility_score=75.0,
    )


@pytest.fixture
def government_source() -> Source:
    """A government dataset reference."""
    return Source(
        name="Food and Drug Administration",
        title="Aspirin labeling data",
        category=SourceCategory.GOVERNMENT,
        url="https://catalog.data.gov/dataset/aspirin-labeling",
        author="Food and Drug Administration",
        credibility_score=95.0,
    )


@pytest.fixture
def supporting_result(encyclopedia_source: Source) -> SourceResult:
    """A confident supporting answer."""
    return SourceResult(
        is_supported=True,
        confidence=80.0,
        evidence=["Aspirin is used to reduce the risk of heart attacks."],
        sources=[encyclopedia_source],
        query_time_ms=12.0,
    )


@pytest.fixture
def refuting_result(government_source: Source) -> SourceResult:
    """A low-confidence non-supporting answer."""
    return SourceResult(
        is_supported=False,
        confidence=50.0,
        evidence=["Labeling data lists aspirin for pain relief."],
        contradictions=["Not recommended for primary prevention."],
        sources=[government_source],
        query_time_ms=20.0,
    )
