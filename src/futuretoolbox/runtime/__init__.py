"""Runtime - Future combinators and their execution model.

Contains: concurrency (aggregation, iteration, lifecycle, interop).
"""

from __future__ import annotations

from .concurrency import *  # noqa: F403
from .concurrency import __all__ as _concurrency_all

__all__ = list(_concurrency_all)
