"""Environment-based configuration using pydantic-settings.

Example:
    >>> from tracekit.config import get_settings
    >>> get_settings().conformance_checks
    True

    # Or with environment variables:
    # TRACEKIT_CONFORMANCE_CHECKS=false
    # TRACEKIT_LOG_LEVEL=DEBUG
    # TRACEKIT_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRACEKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class TracekitSettings(BaseSettings):
    """Root settings for the tracing facade.

    Loads configuration from environment variables with TRACEKIT_ prefix.

    Example environment variables:
        TRACEKIT_CONFORMANCE_CHECKS=false
        TRACEKIT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    conformance_checks: bool = Field(
        default=True,
        description="Validate argument shapes on every Tracer call (disable for hot paths)",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> TracekitSettings:
    """Get the global settings instance (cached)."""
    return TracekitSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
