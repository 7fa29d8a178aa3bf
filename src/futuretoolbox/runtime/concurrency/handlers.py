"""Rejection handling and outcome observation.

    - catch_plus: Handle rejections matching predicates
    - ignore_errors: Turn operational failures into None
    - tap/tap_catch: Observe an outcome without changing it
    - finally_: Run cleanup on either outcome

Programmer errors (TypeError, NameError, SyntaxError) signal bugs, not
operational failures. Catch-all handlers let them through.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from .future import ensure_future, is_future, resolve_with, settle_future, subscribe

Predicate = type[BaseException] | tuple[type[BaseException], ...] | Callable[[BaseException], bool] | Mapping[str, Any]

PROGRAMMER_ERRORS: tuple[type[BaseException], ...] = (TypeError, NameError, SyntaxError)

_MISSING = object()


def is_programmer_error(reason: BaseException) -> bool:
    return isinstance(reason, PROGRAMMER_ERRORS)


def _matches(reason: BaseException, predicate: Predicate) -> bool:
    if isinstance(predicate, type) or isinstance(predicate, tuple):
        return isinstance(reason, predicate)
    if isinstance(predicate, Mapping):
        # Attribute pattern, e.g. {"errno": errno.ENOENT}
        return all(getattr(reason, k, _MISSING) == v for k, v in predicate.items())
    return bool(predicate(reason))


def _handles(reason: BaseException, predicates: tuple[Predicate, ...]) -> bool:
    if not predicates:
        return isinstance(reason, Exception) and not is_programmer_error(reason)
    return any(_matches(reason, p) for p in predicates)


def catch_plus(value: Any, *predicates: Predicate, handler: Callable[[BaseException], Any]) -> asyncio.Future[Any]:
    """Handle rejections of value that match any predicate.

    Predicates may be exception classes (or tuples of them), callables
    returning a bool, or mappings of attribute name to expected value.
    Without predicates every Exception except programmer errors is handled.
    The handler's return value (awaited if awaitable) becomes the outcome;
    unmatched rejections pass through untouched.

    Example:
        >>> config = await catch_plus(load_config(), FileNotFoundError, handler=lambda exc: {})
    """
    source = ensure_future(value)
    target: asyncio.Future[Any] = source.get_loop().create_future()

    def on_rejected(reason: BaseException) -> None:
        if not _handles(reason, predicates):
            settle_future(target, reason=reason)
            return
        try:
            resolve_with(target, handler(reason))
        except Exception as exc:
            settle_future(target, reason=exc)

    subscribe(source, lambda v: settle_future(target, value=v), on_rejected)
    return target


def ignore_errors(value: Any) -> asyncio.Future[Any]:
    """Fulfil with None on operational failures; programmer errors still reject."""
    return catch_plus(value, handler=lambda _: None)


def tap(
    value: Any,
    on_fulfilled: Callable[[Any], Any] | None = None,
    on_rejected: Callable[[BaseException], Any] | None = None,
) -> asyncio.Future[Any]:
    """Run side effects on settlement, keeping the original outcome.

    If a callback returns an awaitable it is waited for first. A callback
    that raises or rejects replaces the outcome with its failure.
    """
    source = ensure_future(value)
    loop = source.get_loop()
    target: asyncio.Future[Any] = loop.create_future()

    def run(callback: Callable[[Any], Any] | None, arg: Any, passthrough: Callable[[], object]) -> None:
        if callback is None:
            passthrough()
            return
        try:
            out = callback(arg)
        except Exception as exc:
            settle_future(target, reason=exc)
            return
        if is_future(out):
            subscribe(ensure_future(out, loop=loop), lambda _: passthrough(),
                      lambda reason: settle_future(target, reason=reason))
        else:
            passthrough()

    subscribe(
        source,
        lambda v: run(on_fulfilled, v, lambda: settle_future(target, value=v)),
        lambda r: run(on_rejected, r, lambda: settle_future(target, reason=r)),
    )
    return target


def tap_catch(value: Any, on_rejected: Callable[[BaseException], Any]) -> asyncio.Future[Any]:
    """tap() with a rejection callback only."""
    return tap(value, None, on_rejected)


def finally_(value: Any, callback: Callable[[], Any]) -> asyncio.Future[Any]:
    """Run ``callback()`` once value settles, whatever the outcome.

    The original outcome is kept unless the callback raises or rejects.
    Cancellation of value counts as an outcome too.

    Example:
        >>> await finally_(query(conn), conn.release)
    """
    return tap(value, lambda _: callback(), lambda _: callback())
