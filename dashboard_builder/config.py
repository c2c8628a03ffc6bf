"""
Application Configuration

Uses pydantic-settings for environment variable loading with validation.
All configuration is centralized here for easy management.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via .env file,
    e.g. DASHBOARD_POSTGRES_QUERY_ENDPOINT=http://localhost:3000/data/query
    """

    model_config = SettingsConfigDict(
        env_prefix="DASHBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level used by configure_logging()"
    )

    # ==========================================================================
    # Data Sources
    # ==========================================================================
    api_base_url: str | None = Field(
        default=None,
        description="Base URL that relative data source endpoints are resolved against"
    )

    postgres_query_endpoint: str | None = Field(
        default="/api/mcp/postgres",
        description="Query execution endpoint for postgresql sources, resolved against api_base_url"
    )

    graphql_endpoint: str | None = Field(
        default=None,
        description="Default GraphQL endpoint when a source does not name one"
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for outbound data source requests"
    )

    cache_ttl_ms: int = Field(
        default=60000,
        ge=0,
        description="Default component data cache TTL in milliseconds"
    )

    # ==========================================================================
    # Snapshot Storage (Redis)
    # ==========================================================================
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for dashboard snapshots"
    )

    snapshot_ttl_seconds: int | None = Field(
        default=None,
        description="Optional expiry for stored dashboard snapshots (None = keep)"
    )

    autosave_debounce_seconds: float = Field(
        default=0.8,
        ge=0,
        description="Delay after the last change before the dashboard is saved"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
