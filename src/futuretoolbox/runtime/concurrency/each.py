"""Sequential async iteration.

for_each visits one element at a time, in traversal order. When the action
returns something awaitable, the next element is visited only after it
fulfils. The first failure, raised or rejected, stops the iteration and
becomes the outcome.

Shape-specific variants skip detection and insist on a shape:
    - for_each_index: Sequences, key is the index
    - for_each_key: Mappings, key is the mapping key
    - for_each_iter: Lazy iterables, pulled one element at a time, key is None
    - for_each_own: An object's own attributes, key is the attribute name

Example:
    >>> async def upload(path, index, paths):
    ...     await client.put(path)
    >>> await for_each(["a.txt", "b.txt"], upload)  # a.txt finishes first
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from typing import Any

from .future import is_future
from .traversal import Shape, Traversal, traverse

Action = Callable[[Any, Hashable | None, Any], Any]

logger = logging.getLogger("futuretoolbox.each")


async def _visit(traversal: Traversal, action: Action) -> None:
    for value, key, collection in traversal:
        try:
            outcome = action(value, key, collection)
            if is_future(outcome):
                await outcome
        except Exception as exc:
            logger.debug(f"for_each: stopped at key {key!r}: {exc!r}")
            raise


def _start(traversal: Traversal, action: Action) -> asyncio.Future[None]:
    return asyncio.ensure_future(_visit(traversal, action))


def for_each(collection: Any, action: Action) -> asyncio.Future[None]:
    """Run ``action(value, key, collection)`` for each element, one at a time.

    Args:
        collection: Sequence, mapping or iterable to visit
        action: Callback; may return an awaitable to delay the next visit

    Returns:
        Future resolving to None once every element has been visited

    Raises:
        TypeError: If collection is not traversable
    """
    return _start(traverse(collection), action)


def for_each_index(collection: Any, action: Action) -> asyncio.Future[None]:
    """for_each over a sequence, keyed by index."""
    return _start(traverse(collection, Shape.SEQUENCE), action)


def for_each_key(collection: Any, action: Action) -> asyncio.Future[None]:
    """for_each over a mapping, keyed by mapping key."""
    return _start(traverse(collection, Shape.MAPPING), action)


def for_each_iter(collection: Any, action: Action) -> asyncio.Future[None]:
    """for_each over a lazy iterable; the next element is pulled only when needed."""
    return _start(traverse(collection, Shape.ITERABLE), action)


def for_each_own(obj: Any, action: Action) -> asyncio.Future[None]:
    """for_each over an object's own attributes (``vars(obj)``)."""
    return _start(traverse(obj, Shape.OBJECT), action)
