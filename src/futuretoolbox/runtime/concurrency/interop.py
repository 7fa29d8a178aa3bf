"""Callback/future interoperability utilities.

Bridges the ``callback(error, result)`` convention and futures:
    - from_callback: Call a callback-style function, get a future
    - promisify: Turn a callback-style function into a future-returning one
    - unpromisify: Turn a future-returning function into a callback-style one
    - as_callback: Report a future's outcome to a callback
    - wrap_call/wrap_apply/attempt: Normalize a synchronous call into a future

In the callback convention ``error is None`` means success. Callbacks may be
invoked from worker threads; the outcome is handed back to the loop that
created the future.

Example:
    >>> def read_config(path, callback):
    ...     try:
    ...         callback(None, open(path).read())
    ...     except OSError as exc:
    ...         callback(exc, None)
    >>>
    >>> text = await from_callback(read_config, "app.toml")
    >>> read_config_async = promisify(read_config)
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from futuretoolbox.foundation.errors import FutureError

from .future import ensure_future, rejected, settle_future, subscribe

Callback = Callable[[BaseException | None, Any], None]

logger = logging.getLogger("futuretoolbox.interop")


def _name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


def _in_loop(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


# ─────────────────────────────────────────────────────────────────────────────
# Callback → Future
# ─────────────────────────────────────────────────────────────────────────────

def from_callback(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
    """Call ``fn(*args, callback, **kwargs)`` and return a future of its outcome.

    The callback settles the future once; later invocations are ignored and
    logged as a warning. A synchronous exception from fn rejects the future.
    A non-exception error value is wrapped in FutureError.

    Example:
        >>> content = await from_callback(read_file, "foo.txt")
    """
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[Any] = loop.create_future()

    def deliver(error: object, result: Any) -> None:
        if fut.done():
            logger.warning(f"from_callback: {_name(fn)} called back after settling, ignoring")
            return
        if error is None:
            fut.set_result(result)
        else:
            fut.set_exception(error if isinstance(error, BaseException) else FutureError(str(error)))

    def callback(error: object = None, result: Any = None) -> None:
        if _in_loop(loop):
            deliver(error, result)
        else:
            loop.call_soon_threadsafe(deliver, error, result)

    try:
        fn(*args, callback, **kwargs)
    except Exception as exc:
        settle_future(fut, reason=exc)
    return fut


def promisify(fn: Callable[..., Any]) -> Callable[..., asyncio.Future[Any]]:
    """Decorator: callback-style function → future-returning function.

    The wrapper takes the same arguments minus the trailing callback.

    Example:
        >>> @promisify
        ... def lookup(host, callback):
        ...     resolver.query(host, callback)
        >>> address = await lookup("example.com")
    """
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        return from_callback(fn, *args, **kwargs)
    return wrapper


# ─────────────────────────────────────────────────────────────────────────────
# Future → Callback
# ─────────────────────────────────────────────────────────────────────────────

def as_callback(value: Any, callback: Callback | None) -> asyncio.Future[Any]:
    """Report the outcome of value to ``callback(error, result)``.

    The callback runs from the event loop once value settles. A callback of
    None does nothing. Returns the underlying future.
    """
    fut = ensure_future(value)
    if callback is not None:
        subscribe(fut, lambda result: callback(None, result), lambda reason: callback(reason, None))
    return fut


def unpromisify(fn: Callable[..., Any]) -> Callable[..., asyncio.Future[Any]]:
    """Decorator: future-returning function → callback-style function.

    The wrapper expects the callback as its last positional argument.

    Example:
        >>> @unpromisify
        ... async def fetch(url):
        ...     ...
        >>> fetch("https://example.com", lambda err, body: print(err or body))
    """
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        if not args:
            raise TypeError(f"{_name(fn)}() expects a callback as last argument")
        *call_args, callback = args
        return as_callback(wrap_call(fn, *call_args, **kwargs), callback)
    return wrapper


# ─────────────────────────────────────────────────────────────────────────────
# Synchronous calls
# ─────────────────────────────────────────────────────────────────────────────

def wrap_call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
    """Call fn now and return a future of its outcome.

    A raised exception becomes a rejected future; an awaitable result is
    adopted; anything else becomes a fulfilled future.
    """
    loop = asyncio.get_running_loop()
    try:
        value = fn(*args, **kwargs)
    except Exception as exc:
        return rejected(exc, loop=loop)
    return ensure_future(value, loop=loop)


def wrap_apply(fn: Callable[..., Any], args: Iterable[Any] = (), kwargs: Mapping[str, Any] | None = None) -> asyncio.Future[Any]:
    """wrap_call with explicit argument containers."""
    return wrap_call(fn, *args, **(kwargs or {}))


def attempt(fn: Callable[[], Any]) -> asyncio.Future[Any]:
    """wrap_call without arguments."""
    return wrap_call(fn)
