"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from futuretoolbox.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.timeout.cancel_source
    True
    >>> settings.logging.level
    'WARNING'

    # Or with environment variables:
    # FUTURETOOLBOX_TIMEOUT_CANCEL_SOURCE=false
    # FUTURETOOLBOX_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FUTURETOOLBOX_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_late_outcomes: bool = Field(
        default=True,
        description="Log outcomes that arrive after an aggregate has settled",
    )

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class TimeoutSettings(BaseSettings):
    """Defaults for timeout()."""

    model_config = SettingsConfigDict(
        env_prefix="FUTURETOOLBOX_TIMEOUT_",
        extra="ignore",
    )

    cancel_source: bool = Field(
        default=True,
        description="Call cancel() on the source future when the timer fires",
    )
    message: Annotated[str, Field(min_length=1)] = "operation timed out"


class FuturetoolboxSettings(BaseSettings):
    """Root settings for futuretoolbox.

    Loads configuration from environment variables with FUTURETOOLBOX_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        FUTURETOOLBOX_DEBUG=true
        FUTURETOOLBOX_LOG_LEVEL=DEBUG
        FUTURETOOLBOX_TIMEOUT_CANCEL_SOURCE=false
    """

    model_config = SettingsConfigDict(
        env_prefix="FUTURETOOLBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    timeout: TimeoutSettings = Field(default_factory=TimeoutSettings)

    @computed_field
    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured level."""
        return "DEBUG" if self.debug else self.logging.level


@lru_cache(maxsize=1)
def get_settings() -> FuturetoolboxSettings:
    """Get the global settings instance (cached).

    Returns:
        Cached FuturetoolboxSettings instance
    """
    return FuturetoolboxSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
