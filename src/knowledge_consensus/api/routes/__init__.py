"""API route modules."""

from knowledge_consensus.api.routes.health import router as health_router
from knowledge_consensus.api.routes.knowledge import router as knowledge_router

__all__ = ["health_router", "knowledge_router"]
