"""Scoped resources over futures.

A Disposer pairs a future resource with the function that releases it.
using() acquires several of them, runs a handler with the values and
releases every acquired resource afterwards, whatever happened.

Example:
    >>> def connection(dsn):
    ...     return disposer(connect(dsn), lambda conn: conn.close())
    >>>
    >>> rows = await using(connection(primary), connection(replica),
    ...                    handler=lambda a, b: compare(a, b))
    >>>
    >>> # Single resource, native syntax
    >>> async with connection(primary) as conn:
    ...     await conn.execute("SELECT 1")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Generic, TypeVar

from .future import ensure_future, is_future
from .wait import settle

T = TypeVar("T")

logger = logging.getLogger("futuretoolbox.dispose")


@dataclass(slots=True, frozen=True)
class Disposer(Generic[T]):
    """A future resource and the callable releasing it.

    ``dispose(value)`` may return an awaitable, which is waited for.
    Also usable as an async context manager for a single resource.

    Attributes:
        resource: Future of the resource
        dispose: Release function, called with the resource value
    """

    resource: asyncio.Future[T]
    dispose: Callable[[T], Any]

    async def release(self) -> None:
        """Dispose of the resource. It must have been acquired."""
        out = self.dispose(self.resource.result())
        if is_future(out):
            await out

    async def __aenter__(self) -> T:
        return await self.resource

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        await self.release()
        return False


def disposer(value: Any, dispose: Callable[[Any], Any]) -> Disposer[Any]:
    """Attach a release function to a resource (future, coroutine or value)."""
    return Disposer(ensure_future(value), dispose)


async def _release_all(held: list[Disposer[Any]]) -> None:
    """Release in reverse acquisition order; the first failure is raised at the end."""
    failure: Exception | None = None
    for item in reversed(held):
        try:
            await item.release()
        except Exception as exc:
            logger.debug(f"using: dispose failed: {exc!r}")
            failure = failure or exc
    if failure is not None:
        raise failure


async def _use(disposers: tuple[Disposer[Any], ...], handler: Callable[..., Any]) -> Any:
    inspections = await settle([d.resource for d in disposers])
    held = [d for d, i in zip(disposers, inspections) if i.is_fulfilled]
    try:
        for inspection in inspections:
            if inspection.is_rejected:
                raise inspection.reason()
        outcome = handler(*(i.value() for i in inspections))
        if is_future(outcome):
            outcome = await outcome
        return outcome
    finally:
        await _release_all(held)


def using(*disposers: Disposer[Any], handler: Callable[..., Any]) -> asyncio.Future[Any]:
    """Acquire every resource, call ``handler(*values)``, then release them.

    Resources are released once the handler's result settles, in reverse
    order, even if it failed. If any resource fails to be acquired the
    handler is not called; the ones that were acquired are released and the
    earliest failed resource, by position, supplies the outcome. A failing
    release replaces the outcome.

    Args:
        disposers: Resources created with disposer()
        handler: Called with the resource values; may return an awaitable

    Returns:
        Future of the handler's outcome

    Raises:
        TypeError: If an argument is not a Disposer
    """
    for d in disposers:
        if not isinstance(d, Disposer):
            raise TypeError(f"using() expects Disposer arguments, got {type(d).__name__!r}")
    return asyncio.ensure_future(_use(disposers, handler))
