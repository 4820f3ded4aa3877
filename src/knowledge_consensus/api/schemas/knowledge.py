"""
Knowledge API Schemas
=====================

Request/response DTOs for the knowledge endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from knowledge_consensus.domain.entities import Domain, FeedbackPolarity, ReliabilityConfig


class KnowledgeQueryRequest(BaseModel):
    """Request body for statement verification."""

    statement: str = Field(
        ...,
        min_length=1,
        max_length=10_000,
        description="Statement to verify against the knowledge sources.",
        examples=["Aspirin reduces the risk of heart attack."],
    )
    domain: Domain | None = Field(
        default=None,
        description="Domain whose reliability weights apply.",
    )
    context: str | None = Field(
        default=None,
        max_length=10_000,
        description="Optional free-text context.",
    )
    max_results: int | None = Field(
        default=None,
        ge=1,
        le=50,
        description="Upper bound on results requested per source.",
    )
    strategy: Literal["all", "best"] | None = Field(
        default=None,
        description=(
            "'all' consolidates every source, 'best' returns the first confident "
            "answer. Defaults to the configured strategy."
        ),
    )


class FeedbackRequest(BaseModel):
    """Reliability feedback for one knowledge source."""

    source_name: str = Field(..., min_length=1)
    polarity: FeedbackPolarity
    domain: Domain | None = Field(
        default=None,
        description="Move the domain-specific weight instead of the base weight.",
    )


class SourceStatus(BaseModel):
    """Reliability configuration of a registered source."""

    name: str
    base_weight: float
    domain_weights: dict[Domain, float] = Field(default_factory=dict)
    enabled: bool

    @classmethod
    def from_config(cls, config: ReliabilityConfig) -> SourceStatus:
        return cls(
            name=config.source_name,
            base_weight=config.base_weight,
            domain_weights=dict(config.domain_weights),
            enabled=config.enabled,
        )


class SourceListResponse(BaseModel):
    """All registered sources in registration order."""

    sources: list[SourceStatus]
