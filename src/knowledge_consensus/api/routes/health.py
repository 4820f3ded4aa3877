"""
Health Check Endpoints
======================

Liveness and readiness probes for Kubernetes/container orchestration.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from knowledge_consensus.domain.services.consolidation_engine import ConsolidationEngine
from knowledge_consensus.domain.services.guards import probe_availability
from knowledge_consensus.domain.services.reliability_registry import SourceRegistration
from knowledge_consensus.infrastructure.config import get_settings
from knowledge_consensus.infrastructure.dependencies import get_consolidation_engine_optional

router = APIRouter()


class HealthStatus(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str
    environment: str


class ReadinessStatus(BaseModel):
    """Readiness check response with per-source details."""

    ready: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sources: dict[str, dict[str, bool | str]] = Field(default_factory=dict)


@router.get(
    "/live",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Check if the API is alive and responding.",
)
async def liveness() -> HealthStatus:
    """
    Liveness probe for container orchestration.

    Always returns healthy if the service is running.
    """
    settings = get_settings()
    return HealthStatus(
        status="healthy",
        version=settings.api.version,
        environment=settings.environment,
    )


@router.get(
    "/ready",
    response_model=ReadinessStatus,
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    description="Check which knowledge sources can currently answer queries.",
)
async def readiness(
    engine: Annotated[ConsolidationEngine | None, Depends(get_consolidation_engine_optional)],
) -> ReadinessStatus:
    """
    Readiness probe checking every registered knowledge source.

    Returns ready=True when at least one enabled source is available.
    Without any source the engine still answers, but only with the
    zero-confidence fallback.
    """
    if engine is None:
        return ReadinessStatus(ready=False)

    async def check_source(registration: SourceRegistration) -> dict[str, bool | str]:
        if not registration.config.enabled:
            return {"available": False, "status": "disabled"}
        available = await probe_availability(registration.adapter)
        return {"available": available, "status": "available" if available else "unavailable"}

    registrations = engine.registry.registrations()
    checks = await asyncio.gather(*(check_source(r) for r in registrations))
    sources = {
        registration.name: check for registration, check in zip(registrations, checks, strict=True)
    }

    return ReadinessStatus(
        ready=any(check["available"] for check in checks),
        sources=sources,
    )


@router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Simple health check endpoint.",
)
async def health() -> HealthStatus:
    """Basic health check - alias for liveness."""
    return await liveness()
