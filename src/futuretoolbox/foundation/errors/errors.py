"""Error kinds raised by future combinators.

Every error carries an ErrorCode so callers can branch on the kind of
failure without string matching. TimeoutError also subclasses the builtin
TimeoutError, so ``except TimeoutError`` keeps working for asyncio users.
"""

from __future__ import annotations

import builtins
from enum import StrEnum
from typing import Sequence


class ErrorCode(StrEnum):
    """Machine-readable classification of combinator failures."""
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    AGGREGATE = "AGGREGATE"
    NO_VALUE = "NO_VALUE"
    UNKNOWN = "UNKNOWN"


class FutureError(Exception):
    """Base class for errors produced by futuretoolbox itself."""

    code: ErrorCode = ErrorCode.UNKNOWN
    default_message = "future operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class TimeoutError(FutureError, builtins.TimeoutError):
    """Raised when a future does not settle within its allotted time."""

    code = ErrorCode.TIMEOUT
    default_message = "operation timed out"


class Cancel(FutureError):
    """Reason carried by a cancellation signal once cancel() is requested."""

    code = ErrorCode.CANCELLED
    default_message = "this action has been cancelled"


class AggregateError(FutureError):
    """Several failures reported as one, in the order they arrived.

    Attributes:
        errors: Collected rejection reasons
    """

    code = ErrorCode.AGGREGATE

    def __init__(self, errors: Sequence[BaseException], message: str | None = None) -> None:
        self.errors: list[BaseException] = list(errors)
        super().__init__(message or f"{len(self.errors)} operation(s) failed")


class InspectionError(FutureError, ValueError):
    """Raised when reading a value or reason an inspection does not hold."""

    code = ErrorCode.NO_VALUE
    default_message = "inspection holds no such outcome"
