"""
FastAPI Application Factory
===========================

Creates and configures the FastAPI application with routers and middleware.
"""

from __future__ import annotations

import secrets

import yaml
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, Response
from fastapi.security import APIKeyHeader

from knowledge_consensus.api.routes import health_router, knowledge_router
from knowledge_consensus.infrastructure.config import get_settings
from knowledge_consensus.infrastructure.dependencies import lifespan_manager

# API Key header
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str | None = Depends(api_key_header)) -> bool:
    """
    Verify API key if authentication is enabled.

    Authentication is off while API_API_KEY is empty.
    """
    settings = get_settings()
    if not settings.api.api_key:
        return True

    if api_key and secrets.compare_digest(api_key, settings.api.api_key):
        return True

    raise HTTPException(
        status_code=401,
        detail="Invalid or missing API key",
        headers={"WWW-Authenticate": "X-API-Key"},
    )


def create_app(*, enable_lifespan: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        enable_lifespan: Connect the knowledge sources on startup. Tests
            disable it and override the dependencies instead.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api.title,
        version=settings.api.version,
        description=(
            "Verifies statements against multiple external knowledge sources "
            "and returns one reliability-weighted verdict with deduplicated "
            "evidence and per-source availability."
        ),
        debug=settings.api.debug,
        lifespan=lifespan_manager if enable_lifespan else None,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(
        knowledge_router,
        prefix="/api/v1",
        tags=["Knowledge"],
        dependencies=[Depends(verify_api_key)],
    )

    @app.get("/openapi.yaml", include_in_schema=False)
    def openapi_yaml() -> Response:
        schema = app.openapi()
        content = yaml.safe_dump(schema, sort_keys=False, allow_unicode=True)
        return Response(content=content, media_type="application/yaml")

    return app
