"""Wrapping layer over asyncio futures.

Every combinator in this package speaks asyncio.Future. This module turns
arbitrary values into futures and provides the one continuation hook the
rest of the package registers through:

    - is_future: Capability check (anything awaitable)
    - ensure_future: Futures pass through, awaitables get scheduled,
      plain values become already-fulfilled futures
    - subscribe: Attach fulfilment/rejection handlers to a future
    - chain/resolve_with: Forward an outcome into another future

Continuations go through ``add_done_callback``, so they always run from the
event loop queue, in registration order, and never synchronously.

Example:
    >>> fut = ensure_future(42)
    >>> subscribe(fut, print, lambda exc: print("failed", exc))
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")

OnFulfilled = Callable[[Any], None]
OnRejected = Callable[[BaseException], None]


def is_future(value: object) -> bool:
    """Whether value can be awaited (future, task, coroutine or __await__ object)."""
    return inspect.isawaitable(value)


def get_loop(candidates: Iterable[object] = ()) -> asyncio.AbstractEventLoop:
    """Loop of the first future among candidates, else the running loop."""
    for candidate in candidates:
        if asyncio.isfuture(candidate):
            return candidate.get_loop()
    return asyncio.get_running_loop()


def resolved(value: T, *, loop: asyncio.AbstractEventLoop | None = None) -> asyncio.Future[T]:
    """Create an already-fulfilled future."""
    fut: asyncio.Future[T] = (loop or asyncio.get_running_loop()).create_future()
    fut.set_result(value)
    return fut


def rejected(reason: BaseException, *, loop: asyncio.AbstractEventLoop | None = None) -> asyncio.Future[Any]:
    """Create an already-rejected future."""
    fut: asyncio.Future[Any] = (loop or asyncio.get_running_loop()).create_future()
    fut.set_exception(reason)
    return fut


def ensure_future(
    value: Awaitable[T] | T,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Future[T]:
    """Normalize any value into a future.

    Futures and tasks are returned unchanged. Other awaitables are scheduled
    via asyncio.ensure_future (coroutines become tasks). Plain values are
    wrapped in an already-fulfilled future.
    """
    if asyncio.isfuture(value):
        return value  # type: ignore[return-value]
    if inspect.isawaitable(value):
        return asyncio.ensure_future(value, loop=loop)
    return resolved(value, loop=loop)  # type: ignore[arg-type]


def subscribe(future: asyncio.Future[Any], on_fulfilled: OnFulfilled, on_rejected: OnRejected) -> None:
    """Register fulfilment and rejection handlers on a future.

    A cancelled future is reported as a rejection carrying a fresh
    asyncio.CancelledError. The outcome is always retrieved, so a future
    observed here never logs "exception was never retrieved". Handlers fire
    at most once per registration, even if a malformed future calls back
    repeatedly.
    """
    fired = False

    def _settled(f: asyncio.Future[Any]) -> None:
        nonlocal fired
        if fired:
            return
        fired = True
        if f.cancelled():
            on_rejected(asyncio.CancelledError())
            return
        exc = f.exception()
        if exc is None:
            on_fulfilled(f.result())
        else:
            on_rejected(exc)

    future.add_done_callback(_settled)


def settle_future(target: asyncio.Future[Any], *, value: object = None, reason: BaseException | None = None) -> bool:
    """Settle target unless it already is. Returns whether it was settled now.

    A CancelledError reason cancels the target instead of rejecting it.
    """
    if target.done():
        return False
    if reason is None:
        target.set_result(value)
    elif isinstance(reason, asyncio.CancelledError):
        # Bypass subclass overrides of cancel(), see CancellableFuture.
        asyncio.Future.cancel(target)
    else:
        target.set_exception(reason)
    return True


def chain(source: asyncio.Future[Any], target: asyncio.Future[Any]) -> asyncio.Future[Any]:
    """Forward the outcome of source into target, unless target settled first."""
    subscribe(
        source,
        lambda value: settle_future(target, value=value),
        lambda reason: settle_future(target, reason=reason),
    )
    return target


def resolve_with(target: asyncio.Future[Any], value: object) -> None:
    """Fulfil target with value, adopting the outcome if value is awaitable."""
    if is_future(value):
        chain(ensure_future(value, loop=target.get_loop()), target)
    else:
        settle_future(target, value=value)


def suppress_unhandled_rejections(future: asyncio.Future[T]) -> asyncio.Future[T]:
    """Mark a future's eventual rejection as observed.

    Use for futures that may reject without anyone awaiting them, such as
    cancellation signals.
    """
    def _observe(f: asyncio.Future[T]) -> None:
        if not f.cancelled():
            f.exception()

    future.add_done_callback(_observe)
    return future
