"""Lifecycle management for single futures.

Provides:
    - CancelToken: Shareable cancellation signal with a separate trigger
    - cancellable: Hand an operation a cancellation signal, expose cancel()
    - timeout: Race a future against a timer
    - defer: Future plus detached resolve/reject triggers
    - delay: Future fulfilled after a duration

Cancellation here is cooperative. The first cancel() on a CancellableFuture
rejects the operation's signal future with Cancel; the operation decides
what to do about it. A task awaiting the future is still cancelled once the
operation settles, so asyncio.timeout() and TaskGroup keep working.

Example:
    >>> @cancellable
    ... async def download(signal, url):
    ...     work = asyncio.ensure_future(fetch(url))
    ...     await asyncio.wait({work, signal}, return_when=asyncio.FIRST_COMPLETED)
    ...     if signal.done():
    ...         work.cancel()
    ...     return await work
    >>>
    >>> fut = download("https://example.com")
    >>> fut.cancel()  # signal rejects, download() aborts its fetch
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, ParamSpec, TypeVar

from pydantic import NonNegativeFloat, TypeAdapter

from futuretoolbox.foundation.config import get_settings
from futuretoolbox.foundation.errors import Cancel, TimeoutError

from .future import (
    chain,
    ensure_future,
    get_loop,
    is_future,
    resolve_with,
    settle_future,
    subscribe,
    suppress_unhandled_rejections,
)

T = TypeVar("T")
P = ParamSpec("P")

logger = logging.getLogger("futuretoolbox.task")

_DURATION: TypeAdapter[float] = TypeAdapter(NonNegativeFloat)


def _seconds(value: float) -> float:
    """Validate a duration in seconds (pydantic ValidationError if negative)."""
    return _DURATION.validate_python(value)


# ─────────────────────────────────────────────────────────────────────────────
# Cancellable operations
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(slots=True, eq=False)
class CancelToken:
    """Shareable cancellation signal.

    The token wraps a signal future that rejects with Cancel once
    cancellation is requested. Only its CancelSource can raise it, so the
    same token can be handed to any number of operations.

    Example:
        >>> source = CancelToken.source()
        >>> fetch_a(source.token, url_a)
        >>> fetch_b(source.token, url_b)
        >>> source.cancel("shutting down")  # both see the signal
    """

    future: asyncio.Future[Any]

    @classmethod
    def source(cls, *parents: CancelToken) -> CancelSource:
        """Create a new token with its trigger.

        The new token is also cancelled, with the same reason, when any of
        the parent tokens is.
        """
        loop = get_loop(parent.future for parent in parents)
        src = CancelSource(cls(suppress_unhandled_rejections(loop.create_future())))
        for parent in parents:
            subscribe(parent.future, lambda _: None, src._raise)
        return src

    @classmethod
    def canceled(cls, message: str | None = None) -> CancelToken:
        """A token whose cancellation has already been requested."""
        src = cls.source()
        src.cancel(message)
        return src.token

    @property
    def requested(self) -> bool:
        return self.future.done()

    @property
    def reason(self) -> Cancel | None:
        """The Cancel raised by the source, None while not requested."""
        if not self.future.done() or self.future.cancelled():
            return None
        return self.future.exception()  # type: ignore[return-value]

    def throw_if_requested(self) -> None:
        """Raise the Cancel reason if cancellation was requested."""
        if self.reason is not None:
            raise self.reason


@dataclass(slots=True)
class CancelSource:
    """Trigger side of a CancelToken."""

    token: CancelToken

    def cancel(self, message: str | None = None) -> bool:
        """Raise the token's signal. Returns False if it was raised already."""
        return self._raise(Cancel(message))

    def _raise(self, reason: BaseException) -> bool:
        if self.token.future.done():
            return False
        logger.debug(f"cancel requested: {reason}")
        self.token.future.set_exception(reason)
        return True


class CancellableFuture(asyncio.Future[T]):
    """Result future of a cancellable operation.

    The first ``cancel()`` raises the operation's cancellation signal and
    leaves this future pending; it returns False because nothing was
    cancelled yet. A task awaiting the future still records the request and
    raises CancelledError once the operation settles. Calling ``cancel()``
    again, or on a future whose operation shares an outside token, cancels
    this future outright.

    Attributes:
        signal: The cancellation signal handed to the operation
    """

    def __init__(self, signal: asyncio.Future[Any], *, source: CancelSource | None = None,
                 loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__(loop=loop)
        self.signal = signal
        self._source = source

    def cancel(self, msg: Any | None = None) -> bool:
        """Request cancellation of the operation.

        Returns:
            True if this future is now cancelled, False if only the signal
            was raised or the operation already settled
        """
        if self.done():
            return False
        if self._source is not None and self._source.cancel(msg):
            return False
        return super().cancel(msg)

    @property
    def cancel_requested(self) -> bool:
        return self.signal.done()


def cancellable(operation: Callable[..., Any]) -> Callable[..., CancellableFuture[Any]]:
    """Wrap an operation that takes a cancellation signal as first argument.

    Each call creates a fresh pending signal, calls
    ``operation(signal, *args, **kwargs)`` and returns a CancellableFuture
    mirroring the operation's outcome. A caller may pass a CancelToken as
    the first argument instead; the operation then receives that token's
    signal. A synchronous exception from the operation rejects the returned
    future. Cancelling the returned future outright also cancels the task
    running a coroutine operation.

    Example:
        >>> @cancellable
        ... def wait_for_ticket(signal, queue):
        ...     ...
        >>> fut = wait_for_ticket(queue)
        >>> fut.cancel()
    """
    @functools.wraps(operation)
    def wrapper(*args: Any, **kwargs: Any) -> CancellableFuture[Any]:
        loop = asyncio.get_running_loop()
        if args and isinstance(args[0], CancelToken):
            source, signal, args = None, args[0].future, args[1:]
        else:
            source = CancelToken.source()
            signal = source.token.future
        result: CancellableFuture[Any] = CancellableFuture(signal, source=source, loop=loop)
        try:
            outcome = operation(signal, *args, **kwargs)
        except Exception as exc:
            result.set_exception(exc)
            return result
        if not is_future(outcome):
            result.set_result(outcome)
            return result
        child = ensure_future(outcome, loop=loop)
        chain(child, result)
        if child is not outcome:
            result.add_done_callback(lambda f: child.cancel() if f.cancelled() else None)
        return result

    return wrapper


# ─────────────────────────────────────────────────────────────────────────────
# Timeout
# ─────────────────────────────────────────────────────────────────────────────

def timeout(
    value: Any,
    seconds: float,
    on_timeout: BaseException | Callable[[], Any] | None = None,
    *,
    cancel_source: bool | None = None,
) -> asyncio.Future[Any]:
    """Race a future against a timer.

    If the source settles first its outcome is forwarded and the timer is
    cancelled. If the timer fires first the result rejects with TimeoutError
    and the source's ``cancel()`` is called once, as a best-effort abort
    (a CancellableFuture forwards this to its operation's signal).

    Args:
        value: Future, coroutine or plain value to race
        seconds: Time limit
        on_timeout: Exception to reject with instead of TimeoutError, or a
            callable whose result becomes the outcome on expiry
        cancel_source: Whether to cancel the source on expiry; defaults to
            settings.timeout.cancel_source

    Returns:
        Future settling with the first outcome

    Raises:
        pydantic.ValidationError: If seconds is negative
        TypeError: If on_timeout is neither an exception nor callable
    """
    seconds = _seconds(seconds)
    if on_timeout is not None and not (isinstance(on_timeout, BaseException) or callable(on_timeout)):
        raise TypeError("on_timeout must be an exception or a callable")

    settings = get_settings().timeout
    if cancel_source is None:
        cancel_source = settings.cancel_source

    source = ensure_future(value)
    loop = source.get_loop()
    result: asyncio.Future[Any] = loop.create_future()

    def expire() -> None:
        if result.done():
            return
        logger.debug(f"timeout: expired after {seconds}s")
        if on_timeout is None:
            settle_future(result, reason=TimeoutError(settings.message))
        elif isinstance(on_timeout, BaseException):
            settle_future(result, reason=on_timeout)
        else:
            try:
                resolve_with(result, on_timeout())
            except Exception as exc:
                settle_future(result, reason=exc)
        if cancel_source:
            source.cancel()

    handle = loop.call_later(seconds, expire)

    def on_done(f: asyncio.Future[Any]) -> None:
        handle.cancel()
        if f.cancelled() and cancel_source and not source.done():
            source.cancel()

    result.add_done_callback(on_done)
    chain(source, result)
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Deferred
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(slots=True)
class Deferred(Generic[T]):
    """A future with its resolve/reject triggers detached.

    The first call to resolve() or reject() wins; later calls are ignored,
    including while a resolve() is still adopting an awaitable's outcome.

    Attributes:
        future: The future being controlled
    """

    future: asyncio.Future[T]
    _locked: bool = field(default=False, init=False, repr=False)

    def resolve(self, value: Any = None) -> None:
        """Fulfil with value, or adopt its outcome if it is awaitable."""
        if self._lock():
            resolve_with(self.future, value)

    def reject(self, reason: BaseException) -> None:
        """Reject with reason."""
        if self._lock():
            settle_future(self.future, reason=reason)

    def _lock(self) -> bool:
        if self._locked or self.future.done():
            return False
        self._locked = True
        return True


def defer() -> Deferred[Any]:
    """Create a Deferred on the running loop.

    Example:
        >>> d = defer()
        >>> loop.call_later(1, d.resolve, "ready")
        >>> await d.future
        'ready'
    """
    return Deferred(asyncio.get_running_loop().create_future())


# ─────────────────────────────────────────────────────────────────────────────
# Delay
# ─────────────────────────────────────────────────────────────────────────────

def delay(seconds: float, value: Any = None) -> asyncio.Future[Any]:
    """Future fulfilled with value after ``seconds``.

    Cancelling the future cancels its timer.
    """
    seconds = _seconds(seconds)
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[Any] = loop.create_future()
    handle = loop.call_later(seconds, functools.partial(resolve_with, fut, value))
    fut.add_done_callback(lambda _: handle.cancel())
    return fut
