"""
Infrastructure Layer
====================

Cross-cutting concerns: configuration, logging, dependency injection,
application bootstrap, and entrypoint.
"""

from knowledge_consensus.infrastructure.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
