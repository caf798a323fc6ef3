"""Configuration management for jsdb."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreConfig(BaseModel):
    """Store configuration."""

    thread_safe: bool = Field(
        default=False, description="Guard the environment with a readers-writer lock"
    )
    lock_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Max seconds to wait for the lock (None = forever)"
    )


class QueryConfig(BaseModel):
    """Query executor configuration."""

    max_result_rows: int | None = Field(
        default=None, ge=1, description="Hard cap on rows returned by a single select"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="jsdb", description="Service name for tracing")
    metrics_enabled: bool = Field(
        default=False, description="Start the Prometheus scrape server on bootstrap"
    )
    metrics_port: int = Field(default=8011, ge=1, le=65535, description="Prometheus metrics port")


class Config(BaseSettings):
    """Main configuration for jsdb."""

    model_config = SettingsConfigDict(
        env_prefix="JSDB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
