"""
Application Layer
=================

Use-case orchestration. Coordinates the consolidation engine and the
reliability store without knowing their concrete implementations.
"""

from knowledge_consensus.application.verify_statement import KnowledgeVerificationService

__all__ = [
    "KnowledgeVerificationService",
]
