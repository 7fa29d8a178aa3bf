"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .logging import ROOT_LOGGER, configure_logging, log_late_outcomes
from .settings import (
    FuturetoolboxSettings,
    LoggingSettings,
    TimeoutSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "FuturetoolboxSettings",
    "LoggingSettings",
    "TimeoutSettings",
    "clear_settings_cache",
    "get_settings",
    "ROOT_LOGGER",
    "configure_logging",
    "log_late_outcomes",
]
