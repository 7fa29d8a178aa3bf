"""Foundation layer: errors and configuration shared by the runtime."""

from .config import (
    FuturetoolboxSettings,
    clear_settings_cache,
    configure_logging,
    get_settings,
)
from .errors import AggregateError, Cancel, ErrorCode, FutureError, InspectionError, TimeoutError

__all__ = [
    # Config
    "FuturetoolboxSettings",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
    # Errors
    "ErrorCode",
    "FutureError",
    "TimeoutError",
    "Cancel",
    "AggregateError",
    "InspectionError",
]
