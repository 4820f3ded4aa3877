"""
Knowledge API Endpoints
=======================

Statement verification against the registered knowledge sources and
source reliability management.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from knowledge_consensus.api.schemas.knowledge import (
    FeedbackRequest,
    KnowledgeQueryRequest,
    SourceListResponse,
    SourceStatus,
)
from knowledge_consensus.application.verify_statement import KnowledgeVerificationService
from knowledge_consensus.domain.entities import ConsolidatedResult
from knowledge_consensus.domain.errors import InvalidQueryError
from knowledge_consensus.infrastructure.dependencies import get_verification_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _format_text_preview(text: str, max_len: int = 120) -> str:
    normalized = " ".join(text.strip().split())
    if len(normalized) <= max_len:
        return normalized
    return f"{normalized[:max_len].rstrip()}..."


@router.post(
    "/knowledge/query",
    response_model=ConsolidatedResult,
    status_code=status.HTTP_200_OK,
    summary="Verify a statement",
    description=(
        "Ask the registered knowledge sources about a statement and return one "
        "reliability-weighted verdict with deduplicated evidence."
    ),
)
async def query_knowledge(
    request: KnowledgeQueryRequest,
    service: Annotated[KnowledgeVerificationService, Depends(get_verification_service)],
) -> ConsolidatedResult:
    """
    Verify a statement.

    Source failures never fail the request; they show up in
    ``unavailable_sources``. Only a blank statement is rejected.
    """
    logger.info(
        f'Knowledge query: strategy={request.strategy or "default"} '
        f'domain={request.domain} statement="{_format_text_preview(request.statement)}"'
    )

    try:
        return await service.verify(
            request.statement,
            domain=request.domain,
            context=request.context,
            max_results=request.max_results,
            strategy=request.strategy,
        )
    except InvalidQueryError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        ) from e
    except Exception as e:
        logger.error(f"Knowledge query failed: {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Verification failed: {e!s}",
        ) from e


@router.post(
    "/knowledge/feedback",
    response_model=SourceStatus,
    status_code=status.HTTP_200_OK,
    summary="Record reliability feedback",
    description="Move a source's weight one step up or down.",
)
async def record_feedback(
    request: FeedbackRequest,
    service: Annotated[KnowledgeVerificationService, Depends(get_verification_service)],
) -> SourceStatus:
    """Apply positive or negative feedback to a registered source."""
    updated = await service.record_feedback(
        request.source_name,
        request.polarity,
        request.domain,
    )
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown knowledge source: {request.source_name}",
        )
    return SourceStatus.from_config(updated)


@router.get(
    "/knowledge/sources",
    response_model=SourceListResponse,
    status_code=status.HTTP_200_OK,
    summary="List knowledge sources",
    description="Registered sources with their current reliability weights.",
)
async def list_sources(
    service: Annotated[KnowledgeVerificationService, Depends(get_verification_service)],
) -> SourceListResponse:
    return SourceListResponse(
        sources=[SourceStatus.from_config(config) for config in service.source_status().values()]
    )
