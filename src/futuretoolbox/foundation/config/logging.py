"""Logger setup for the futuretoolbox namespace.

Library modules log through ``logging.getLogger("futuretoolbox.<area>")``.
Nothing is printed unless the application configures handlers; this
module only applies the configured level.
"""

from __future__ import annotations

import logging

from .settings import get_settings

ROOT_LOGGER = "futuretoolbox"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Apply a log level to the futuretoolbox logger tree.

    Args:
        level: Explicit level; defaults to the effective level from settings

    Returns:
        The package root logger
    """
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(level if level is not None else get_settings().effective_log_level)
    return log


def log_late_outcomes() -> bool:
    """Whether outcomes arriving after an aggregate settled should be logged."""
    return get_settings().logging.log_late_outcomes
