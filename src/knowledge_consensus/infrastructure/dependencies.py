"""
Dependency Injection Container
==============================

Provides FastAPI dependency functions for injecting the verification
service. Wires the knowledge-source adapters into the reliability
registry based on configuration.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from knowledge_consensus.adapters.outbound.knowledge_sources import (
    GovernmentDataAdapter,
    WikipediaAdapter,
)
from knowledge_consensus.adapters.outbound.reliability_memory import InMemoryReliabilityStore
from knowledge_consensus.application.verify_statement import KnowledgeVerificationService
from knowledge_consensus.domain.entities import Domain, ReliabilityConfig
from knowledge_consensus.domain.services.consolidation_engine import ConsolidationEngine
from knowledge_consensus.domain.services.reliability_registry import SourceReliabilityRegistry
from knowledge_consensus.infrastructure.config import Settings, get_settings
from knowledge_consensus.infrastructure.logging import configure_logging

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Starting trust for the built-in sources. Feedback moves these at runtime.
WIKIPEDIA_RELIABILITY = ReliabilityConfig(
    source_name="Wikipedia",
    base_weight=0.75,
    domain_weights={
        Domain.HEALTHCARE: 0.7,
        Domain.FINANCIAL: 0.75,
        Domain.LEGAL: 0.65,
        Domain.INSURANCE: 0.7,
    },
)

GOVERNMENT_DATA_RELIABILITY = ReliabilityConfig(
    source_name="Government Data",
    base_weight=0.95,
    domain_weights={
        Domain.HEALTHCARE: 0.98,
        Domain.FINANCIAL: 0.95,
        Domain.LEGAL: 0.97,
        Domain.INSURANCE: 0.9,
    },
)


# -----------------------------------------------------------------------------
# Singleton holders (initialized on app startup)
# -----------------------------------------------------------------------------

_registry: SourceReliabilityRegistry | None = None
_engine: ConsolidationEngine | None = None
_reliability_store: InMemoryReliabilityStore | None = None
_verification_service: KnowledgeVerificationService | None = None


# -----------------------------------------------------------------------------
# Wiring
# -----------------------------------------------------------------------------


def build_default_registry(settings: Settings | None = None) -> SourceReliabilityRegistry:
    """
    Registry with the built-in knowledge sources enabled in settings.

    Government data is registered before Wikipedia, so it also wins
    ties in the reliability ordering.
    """
    settings = settings or get_settings()
    registry = SourceReliabilityRegistry()

    gov = settings.government_data
    if gov.enabled:
        registry.register(
            GovernmentDataAdapter(
                base_url=gov.base_url,
                api_key=gov.api_key.get_secret_value() if gov.api_key else None,
                timeout=gov.timeout_seconds,
                max_retries=gov.max_retries,
                max_results=gov.max_results,
            ),
            GOVERNMENT_DATA_RELIABILITY,
        )
    else:
        logger.info("Government data source disabled")

    wiki = settings.wikipedia
    if wiki.enabled:
        registry.register(
            WikipediaAdapter(
                base_url=wiki.base_url,
                timeout=wiki.timeout_seconds,
                max_retries=wiki.max_retries,
                max_results=wiki.max_results,
            ),
            WIKIPEDIA_RELIABILITY,
        )
    else:
        logger.info("Wikipedia source disabled")

    return registry


def build_verification_service(
    settings: Settings | None = None,
    registry: SourceReliabilityRegistry | None = None,
    store: InMemoryReliabilityStore | None = None,
) -> KnowledgeVerificationService:
    """Engine plus use-case on top of a (default) registry."""
    settings = settings or get_settings()
    engine = ConsolidationEngine(
        registry if registry is not None else build_default_registry(settings),
        fallback_enabled=settings.consolidation.fallback_enabled,
    )
    return KnowledgeVerificationService(
        engine,
        store=store,
        default_strategy=settings.consolidation.default_strategy,
    )


# -----------------------------------------------------------------------------
# Lifecycle management
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan_manager(app: FastAPI) -> AsyncIterator[dict[str, Any]]:
    """
    Manage application lifecycle: initialize and cleanup adapters.

    Usage in FastAPI:
        app = FastAPI(lifespan=lifespan_manager)
    """
    # Worker processes spawned by uvicorn do not inherit the entrypoint's
    # logging setup; basicConfig is a no-op when handlers already exist.
    configure_logging(get_settings().log_level)

    await _initialize_adapters()
    try:
        yield {}
    finally:
        await _cleanup_adapters()


async def _initialize_adapters() -> None:
    """Build the registry, connect every adapter and restore saved weights."""
    global _registry, _engine, _reliability_store, _verification_service

    settings = get_settings()
    logger.info(f"Initializing DI container - Environment: {settings.environment}")

    _registry = build_default_registry(settings)
    _reliability_store = InMemoryReliabilityStore()
    _verification_service = build_verification_service(
        settings, registry=_registry, store=_reliability_store
    )
    _engine = _verification_service.engine

    for adapter in _registry.adapters():
        try:
            await adapter.connect()
        except Exception as e:
            # is_available() connects lazily, so the source can recover later.
            logger.warning(f"Knowledge source {adapter.name} failed to connect: {e}")

    restored = await _verification_service.load_reliability()
    logger.info(
        f"DI container ready: sources={_registry.names()}, "
        f"restored_configs={restored}, "
        f"strategy={settings.consolidation.default_strategy}"
    )


async def _cleanup_adapters() -> None:
    """
    Cleanup all adapter connections on shutdown.

    Uses asyncio.shield() to protect cleanup operations from task cancellation.
    Each disconnect is wrapped in try/except to ensure all adapters get cleaned up.
    """
    global _registry, _engine, _reliability_store, _verification_service

    logger.info("Starting adapter cleanup...")

    if _registry is not None:
        for adapter in _registry.adapters():
            try:
                await asyncio.shield(asyncio.wait_for(adapter.disconnect(), timeout=5.0))
                logger.debug(f"Disconnected knowledge source: {adapter.name}")
            except TimeoutError:
                logger.warning(f"Knowledge source disconnect timed out: {adapter.name}")
            except asyncio.CancelledError:
                logger.warning(f"Knowledge source disconnect cancelled: {adapter.name}")
            except Exception as e:
                logger.warning(f"Knowledge source disconnect failed: {e}")

    _verification_service = None
    _engine = None
    _reliability_store = None
    _registry = None

    logger.info("Adapter cleanup complete")


# -----------------------------------------------------------------------------
# FastAPI Dependency providers
# -----------------------------------------------------------------------------


async def get_verification_service() -> KnowledgeVerificationService:
    """Dependency: Get the knowledge verification use-case."""
    if _verification_service is None:
        raise RuntimeError("Verification service not initialized. Check adapter configuration.")
    return _verification_service


async def get_consolidation_engine_optional() -> ConsolidationEngine | None:
    """Dependency: Get the consolidation engine if initialized."""
    return _engine
