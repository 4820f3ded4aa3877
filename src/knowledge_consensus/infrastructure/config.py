"""
Configuration Management
========================

Pydantic-settings based configuration for the knowledge sources, the
consolidation engine and the HTTP surface.
Reads from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class WikipediaSettings(BaseSettings):
    """Configuration for the Wikipedia (MediaWiki) knowledge source."""

    model_config = SettingsConfigDict(env_prefix="WIKIPEDIA_")

    enabled: bool = Field(default=True)
    base_url: str = Field(
        default="https://en.wikipedia.org",
        description="MediaWiki site root; the Action API lives under /w/api.php",
    )
    timeout_seconds: float = Field(default=5.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    max_results: int = Field(default=5, ge=1, le=50)


class GovernmentDataSettings(BaseSettings):
    """Configuration for the data.gov catalog knowledge source."""

    model_config = SettingsConfigDict(env_prefix="GOVDATA_")

    enabled: bool = Field(default=True)
    base_url: str = Field(default="https://catalog.data.gov")
    api_key: SecretStr | None = Field(
        default=None,
        description="api.data.gov key for higher rate limits",
    )
    # Government APIs can be slower
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    max_results: int = Field(default=5, ge=1, le=100)


class ConsolidationSettings(BaseSettings):
    """Configuration for the consolidation engine."""

    model_config = SettingsConfigDict(env_prefix="CONSOLIDATION_")

    fallback_enabled: bool = Field(
        default=True,
        description="Add the 'no external sources' evidence message when nothing answers",
    )
    default_strategy: Literal["all", "best"] = Field(
        default="all",
        description="'all' consolidates every source, 'best' uses the fast path",
    )


class APISettings(BaseSettings):
    """Configuration for the FastAPI application."""

    model_config = SettingsConfigDict(env_prefix="API_")

    title: str = Field(default="Knowledge Consensus API")
    version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    workers: int = Field(default=1, ge=1)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    # API key for public access (optional, leave empty to disable)
    api_key: str = Field(
        default="",
        description="API key for authentication. Leave empty to disable auth.",
    )


class Settings(BaseSettings):
    """
    Root configuration aggregating all service settings.

    Usage:
        settings = get_settings()
        timeout = settings.wikipedia.timeout_seconds
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested settings (manually instantiated due to pydantic-settings behavior)
    wikipedia: WikipediaSettings = Field(default_factory=WikipediaSettings)
    government_data: GovernmentDataSettings = Field(default_factory=GovernmentDataSettings)
    consolidation: ConsolidationSettings = Field(default_factory=ConsolidationSettings)
    api: APISettings = Field(default_factory=APISettings)

    # Environment
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance, reading from environment on first call.
    """
    return Settings()
