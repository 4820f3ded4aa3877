"""
Domain Entities
===============

Core value objects exchanged between the consolidation engine, the
knowledge-source adapters and the callers of the engine.
These are immutable value objects with no infrastructure dependencies.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum, auto
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

FALLBACK_EVIDENCE_MESSAGE = "No external sources available for verification"


class Domain(StrEnum):
    """Subject-matter domain a statement belongs to."""

    HEALTHCARE = auto()
    FINANCIAL = auto()
    LEGAL = auto()
    INSURANCE = auto()
    GENERAL = auto()


class SourceCategory(StrEnum):
    """Kind of publisher behind a piece of evidence."""

    ENCYCLOPEDIA = auto()  # Wikipedia and other reference works
    GOVERNMENT = auto()  # Official registries and agency data
    ACADEMIC = auto()
    INDUSTRY = auto()
    NEWS = auto()
    INTERNAL = auto()
    OTHER = auto()


class FeedbackPolarity(StrEnum):
    """Direction of a reliability feedback event."""

    POSITIVE = auto()
    NEGATIVE = auto()


def clamp_weight(value: float) -> float:
    """Clamp a reliability weight into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


class Source(BaseModel):
    """
    Reference to a piece of external evidence.

    Created by an adapter when it returns evidence and never mutated
    afterwards.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(..., description="Publisher or provider name")
    title: str = Field(..., description="Document or entry title")
    category: SourceCategory = Field(default=SourceCategory.OTHER)
    url: str | None = Field(default=None)

    publish_date: datetime | None = Field(default=None)
    last_updated: datetime | None = Field(default=None)
    last_verified: datetime | None = Field(default=None)
    author: str | None = Field(default=None)

    credibility_score: float = Field(
        default=50.0, ge=0.0, le=100.0, description="Raw credibility (0-100)"
    )

    model_config = {"frozen": True}


class KnowledgeQuery(BaseModel):
    """A verification request fanned out to the knowledge sources."""

    statement: str = Field(..., description="Statement to verify")
    domain: Domain | None = Field(default=None)
    context: str | None = Field(default=None, description="Free-text context")
    max_results: int | None = Field(
        default=None, ge=1, description="Upper bound on results per source"
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Per-source request timeout hint; the engine itself sets no deadline",
    )

    model_config = {"frozen": True}


class SourceResult(BaseModel):
    """One adapter's answer to a knowledge query."""

    is_supported: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    evidence: list[str] = Field(default_factory=list)
    contradictions: list[str] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    query_time_ms: float = Field(default=0.0, ge=0.0)

    model_config = {"frozen": True}

    @classmethod
    def empty(cls, query_time_ms: float = 0.0) -> SourceResult:
        """Result for a query that produced nothing."""
        return cls(query_time_ms=query_time_ms)


class ReliabilityConfig(BaseModel):
    """
    Trust configuration for one registered knowledge source.

    Weights are clamped into [0, 1] on construction, so an out-of-range
    weight can never be observed. Instances are frozen: the registry
    replaces a config instead of mutating it.
    """

    source_name: str
    base_weight: float = Field(default=0.5)
    domain_weights: dict[Domain, float] = Field(default_factory=dict)
    enabled: bool = True

    model_config = {"frozen": True}

    @field_validator("base_weight")
    @classmethod
    def _clamp_base_weight(cls, value: float) -> float:
        return clamp_weight(value)

    @field_validator("domain_weights")
    @classmethod
    def _clamp_domain_weights(cls, value: dict[Domain, float]) -> dict[Domain, float]:
        return {domain: clamp_weight(weight) for domain, weight in value.items()}

    def weight_for(self, domain: Domain | str | None = None) -> float:
        """Domain override if present, else the base weight."""
        if domain is not None and domain in self.domain_weights:
            return self.domain_weights[domain]
        return self.base_weight


class ConsolidatedResult(BaseModel):
    """
    The engine's single verdict for a knowledge query.

    Aggregates zero or more per-source answers. Created once per call
    and returned to the caller; never persisted by the engine.
    """

    sources: list[Source] = Field(default_factory=list)
    overall_confidence: int = Field(default=0, ge=0, le=100)
    is_supported: bool = False
    evidence: list[str] = Field(default_factory=list)
    contradictions: list[str] = Field(default_factory=list)
    source_reliability_weights: dict[str, float] = Field(default_factory=dict)
    query_time_ms: float = Field(default=1.0, ge=1.0)
    available_sources: list[str] = Field(default_factory=list)
    unavailable_sources: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    @property
    def is_fallback(self) -> bool:
        """Whether this is the synthetic no-sources result."""
        return not self.available_sources and self.evidence == [FALLBACK_EVIDENCE_MESSAGE]
