"""Composable combinators over asyncio futures.

Every combinator is a plain function that returns an asyncio.Future right
away. Nothing here starts threads or runs work in parallel: concurrency
means several pending operations, scheduled by the event loop.

Key Components:
    - Wrapping: is_future, ensure_future, resolved, rejected
    - Traversal: uniform (value, key, collection) walking of sequences,
      mappings, lazy iterables and object attributes
    - Aggregation: all_, some, settle, reflect
    - Iteration: for_each and its shape-specific variants
    - Lifecycle: CancelToken, cancellable, timeout, defer, delay
    - Interop: from_callback, promisify, unpromisify, as_callback
    - Handlers: catch_plus, ignore_errors, tap, tap_catch, finally_
    - Resources: disposer, using

Example:
    >>> from futuretoolbox.runtime.concurrency import all_, some, timeout
    >>>
    >>> # Same shape in, same shape out
    >>> profile = await all_({"user": get_user(1), "prefs": get_prefs(1)})
    >>>
    >>> # Two replicas out of three, within a second
    >>> acks = await timeout(some([write(r) for r in replicas], 2), 1.0)
"""

from __future__ import annotations

# Wrapping
from .future import (
    chain,
    ensure_future,
    is_future,
    rejected,
    resolved,
    subscribe,
    suppress_unhandled_rejections,
)

# Traversal
from .traversal import (
    Shape,
    Traversal,
    detect_shape,
    traverse,
)

# Aggregation
from .wait import (
    Inspection,
    InspectionStatus,
    SettlementRecord,
    all_,
    inspect_future,
    reflect,
    settle,
    some,
)

# Iteration
from .each import (
    for_each,
    for_each_index,
    for_each_iter,
    for_each_key,
    for_each_own,
)

# Lifecycle
from .task import (
    CancellableFuture,
    CancelSource,
    CancelToken,
    Deferred,
    cancellable,
    defer,
    delay,
    timeout,
)

# Interop
from .interop import (
    as_callback,
    attempt,
    from_callback,
    promisify,
    unpromisify,
    wrap_apply,
    wrap_call,
)

# Handlers
from .handlers import (
    catch_plus,
    finally_,
    ignore_errors,
    is_programmer_error,
    tap,
    tap_catch,
)

# Resources
from .dispose import (
    Disposer,
    disposer,
    using,
)

__all__ = [
    # Wrapping
    "chain",
    "ensure_future",
    "is_future",
    "rejected",
    "resolved",
    "subscribe",
    "suppress_unhandled_rejections",
    # Traversal
    "Shape",
    "Traversal",
    "detect_shape",
    "traverse",
    # Aggregation
    "Inspection",
    "InspectionStatus",
    "SettlementRecord",
    "all_",
    "inspect_future",
    "reflect",
    "settle",
    "some",
    # Iteration
    "for_each",
    "for_each_index",
    "for_each_iter",
    "for_each_key",
    "for_each_own",
    # Lifecycle
    "CancellableFuture",
    "CancelSource",
    "CancelToken",
    "Deferred",
    "cancellable",
    "defer",
    "delay",
    "timeout",
    # Interop
    "as_callback",
    "attempt",
    "from_callback",
    "promisify",
    "unpromisify",
    "wrap_apply",
    "wrap_call",
    # Handlers
    "catch_plus",
    "finally_",
    "ignore_errors",
    "is_programmer_error",
    "tap",
    "tap_catch",
    # Resources
    "Disposer",
    "disposer",
    "using",
]
