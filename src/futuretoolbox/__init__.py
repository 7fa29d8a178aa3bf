"""futuretoolbox - Composable combinators for asyncio futures.

Fan out over collections of futures, race them against timers, hand
operations a cancellation signal, and bridge callback-style APIs. Every
combinator returns an asyncio.Future immediately; scheduling stays with the
event loop.

Quick Start:
    >>> from futuretoolbox import all_, settle, some, timeout
    >>>
    >>> # Wait for everything, keep the shape
    >>> await all_([1, fetch(2), fetch(3)])
    [1, 2, 3]
    >>>
    >>> # Collect every outcome, never fail
    >>> for r in (await settle({"a": fetch(1), "b": broken()})).values():
    ...     print(r.is_fulfilled)
    >>>
    >>> # First two successes out of three
    >>> await some([mirror_a(), mirror_b(), mirror_c()], 2)
    >>>
    >>> # Give up after half a second
    >>> await timeout(slow_call(), 0.5)

Cancellation:
    >>> from futuretoolbox import CancelToken, cancellable
    >>>
    >>> @cancellable
    ... async def poll(signal, url):
    ...     while not signal.done():
    ...         ...
    >>> fut = poll("https://example.com/status")
    >>> fut.cancel()  # poll() sees the signal and stops
    >>>
    >>> # One token shared by several calls
    >>> source = CancelToken.source()
    >>> polls = [poll(source.token, url) for url in urls]
    >>> source.cancel("shutting down")

Callback Interop:
    >>> from futuretoolbox import from_callback, promisify
    >>> data = await from_callback(legacy_read, "file.txt")
"""

from __future__ import annotations

__version__ = "0.1.0"

# Foundation
from .foundation import (
    AggregateError,
    Cancel,
    ErrorCode,
    FutureError,
    FuturetoolboxSettings,
    InspectionError,
    TimeoutError,
    clear_settings_cache,
    configure_logging,
    get_settings,
)

# Combinators
from .runtime.concurrency import (
    CancellableFuture,
    CancelSource,
    CancelToken,
    Deferred,
    Disposer,
    Inspection,
    InspectionStatus,
    Shape,
    Traversal,
    all_,
    as_callback,
    attempt,
    cancellable,
    catch_plus,
    chain,
    defer,
    delay,
    disposer,
    ensure_future,
    finally_,
    for_each,
    for_each_index,
    for_each_iter,
    for_each_key,
    for_each_own,
    from_callback,
    ignore_errors,
    inspect_future,
    is_future,
    is_programmer_error,
    promisify,
    reflect,
    rejected,
    resolved,
    settle,
    some,
    suppress_unhandled_rejections,
    tap,
    tap_catch,
    timeout,
    traverse,
    unpromisify,
    using,
    wrap_apply,
    wrap_call,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "ErrorCode",
    "FutureError",
    "TimeoutError",
    "Cancel",
    "AggregateError",
    "InspectionError",
    # Config
    "FuturetoolboxSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
    # Wrapping
    "is_future",
    "ensure_future",
    "resolved",
    "rejected",
    "chain",
    "suppress_unhandled_rejections",
    # Traversal
    "Shape",
    "Traversal",
    "traverse",
    # Aggregation
    "all_",
    "some",
    "settle",
    "reflect",
    "inspect_future",
    "Inspection",
    "InspectionStatus",
    # Iteration
    "for_each",
    "for_each_index",
    "for_each_key",
    "for_each_iter",
    "for_each_own",
    # Lifecycle
    "CancelToken",
    "CancelSource",
    "cancellable",
    "CancellableFuture",
    "timeout",
    "defer",
    "Deferred",
    "delay",
    # Interop
    "from_callback",
    "promisify",
    "unpromisify",
    "as_callback",
    "wrap_call",
    "wrap_apply",
    "attempt",
    # Handlers
    "catch_plus",
    "ignore_errors",
    "is_programmer_error",
    "tap",
    "tap_catch",
    "finally_",
    # Resources
    "disposer",
    "Disposer",
    "using",
]
