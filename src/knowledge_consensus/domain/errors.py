"""
Domain Errors
=============

Exception hierarchy for the consolidation engine.

Only ``InvalidQueryError`` ever reaches a caller of the engine. Source
faults are classified with the other types, logged and recorded in the
result's ``unavailable_sources``.
"""

from __future__ import annotations


class KnowledgeConsensusError(Exception):
    """Base class for all knowledge-consensus errors."""

    pass


class InvalidQueryError(KnowledgeConsensusError, ValueError):
    """Raised when a query is malformed, before any source is contacted."""

    pass


class SourceUnavailableError(KnowledgeConsensusError):
    """A source reported itself unavailable or its availability check failed."""

    def __init__(self, source_name: str, reason: str = "unavailable") -> None:
        super().__init__(f"{source_name}: {reason}")
        self.source_name = source_name
        self.reason = reason


class SourceQueryError(KnowledgeConsensusError):
    """A source raised while answering a query."""

    def __init__(self, source_name: str, reason: str) -> None:
        super().__init__(f"{source_name}: {reason}")
        self.source_name = source_name
        self.reason = reason
