"""Error kinds for future combinators.

- ErrorCode: Classification of combinator failures
- FutureError: Base class
- TimeoutError/Cancel/AggregateError/InspectionError: Specific kinds
"""

from .errors import AggregateError, Cancel, ErrorCode, FutureError, InspectionError, TimeoutError

__all__ = [
    "ErrorCode", "FutureError",
    "TimeoutError", "Cancel", "AggregateError", "InspectionError",
]
