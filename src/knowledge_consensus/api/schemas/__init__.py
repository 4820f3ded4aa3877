"""API request/response schemas."""

from knowledge_consensus.api.schemas.knowledge import (
    FeedbackRequest,
    KnowledgeQueryRequest,
    SourceListResponse,
    SourceStatus,
)

__all__ = [
    "FeedbackRequest",
    "KnowledgeQueryRequest",
    "SourceListResponse",
    "SourceStatus",
]
