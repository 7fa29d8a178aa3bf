"""Aggregation strategies over collections of futures.

Provides the fan-in combinators:
    - all_: Every element fulfils, first rejection wins
    - some: First ``count`` fulfilments, fail once success is impossible
    - settle: Outcome of every element as an Inspection, never rejects
    - reflect/inspect_future: Turn one future's state into data

All of them are plain functions returning an asyncio.Future immediately.
Collections may be lists, tuples, dicts, generators, or any other iterable;
elements may be plain values, futures, tasks or coroutines.

Example:
    >>> # Shape is preserved
    >>> await all_({"user": fetch_user(1), "orders": fetch_orders(1)})
    {'user': ..., 'orders': ...}

    >>> # Two of three mirrors are enough
    >>> await some([mirror_a(), mirror_b(), mirror_c()], 2)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

from futuretoolbox.foundation.config import log_late_outcomes
from futuretoolbox.foundation.errors import AggregateError, InspectionError

from .future import ensure_future, get_loop, is_future, settle_future, subscribe
from .traversal import traverse

T = TypeVar("T")

Mapper = Callable[[Any, Hashable | None, Any], Any]

logger = logging.getLogger("futuretoolbox.wait")


class InspectionStatus(StrEnum):
    """State captured by an Inspection."""
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(slots=True, frozen=True)
class Inspection(Generic[T]):
    """Immutable snapshot of a future's state.

    Attributes:
        status: 'pending', 'fulfilled' or 'rejected'
        result: Value if fulfilled
        error: Exception if rejected
    """

    status: InspectionStatus
    result: T | None = None
    error: BaseException | None = None

    @classmethod
    def fulfilled(cls, value: T) -> Inspection[T]:
        return cls(InspectionStatus.FULFILLED, result=value)

    @classmethod
    def rejected(cls, reason: BaseException) -> Inspection[T]:
        return cls(InspectionStatus.REJECTED, error=reason)

    @classmethod
    def pending(cls) -> Inspection[T]:
        return cls(InspectionStatus.PENDING)

    @property
    def is_fulfilled(self) -> bool:
        return self.status == InspectionStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status == InspectionStatus.REJECTED

    @property
    def is_pending(self) -> bool:
        return self.status == InspectionStatus.PENDING

    @property
    def is_resolved(self) -> bool:
        """Settled either way."""
        return not self.is_pending

    def value(self) -> T:
        """Fulfilment value.

        Raises:
            InspectionError: If the future did not fulfil
        """
        if not self.is_fulfilled:
            raise InspectionError(f"no value: future is {self.status.value}")
        return self.result  # type: ignore[return-value]

    def reason(self) -> BaseException:
        """Rejection reason.

        Raises:
            InspectionError: If the future did not reject
        """
        if not self.is_rejected:
            raise InspectionError(f"no reason: future is {self.status.value}")
        return self.error  # type: ignore[return-value]

    def unwrap(self) -> T:
        """Get value or raise stored error."""
        if self.is_rejected:
            raise self.error  # type: ignore[misc]
        return self.value()

    def unwrap_or(self, default: T) -> T:
        """Get value or return default."""
        return self.result if self.is_fulfilled else default  # type: ignore[return-value]


@dataclass(slots=True)
class SettlementRecord:
    """Bookkeeping for one aggregate call.

    Owned by a single combinator invocation and mutated only by the
    completion callbacks of its children. ``close()`` nulls both
    accumulators before the aggregate settles; a closed record turns every
    later callback into a no-op.
    """

    remaining: int
    results: Any = None
    errors: list[BaseException] | None = field(default=None)

    @property
    def closed(self) -> bool:
        return self.results is None and self.errors is None

    def close(self) -> tuple[Any, list[BaseException] | None]:
        results, errors = self.results, self.errors
        self.results = self.errors = None
        return results, errors


def _discard(combinator: str, outcome: object) -> None:
    if log_late_outcomes():
        logger.debug(f"{combinator}: discarding outcome after settlement: {outcome!r}")


def _cancel_owned_on_cancel(aggregate: asyncio.Future[Any], record: SettlementRecord,
                            owned: list[asyncio.Future[Any]]) -> None:
    """Cancel the tasks we created when the caller cancels the aggregate."""
    def _on_done(f: asyncio.Future[Any]) -> None:
        if not f.cancelled():
            return
        record.close()
        for child in owned:
            child.cancel()

    aggregate.add_done_callback(_on_done)


def _abandon(owned: list[asyncio.Future[Any]], unvisited: Iterable[Any]) -> None:
    """Stop work started for an aggregate that rejected before registering everything."""
    for child in owned:
        child.cancel()
    for value in unvisited:
        if inspect.iscoroutine(value):
            value.close()


# ─────────────────────────────────────────────────────────────────────────────
# All: every element must fulfil
# ─────────────────────────────────────────────────────────────────────────────

def all_(collection: Any, mapper: Mapper | None = None) -> asyncio.Future[Any]:
    """Wait for every element of a collection.

    The result has the collection's shape: a list for sequences and lazy
    iterables, a dict (input key order) for mappings. Plain values count as
    already fulfilled. The first element to reject, by completion order,
    rejects the aggregate; later outcomes are discarded.

    Args:
        collection: Values, futures, tasks or coroutines
        mapper: Optional ``mapper(value, key, collection)`` applied to every
            element up front, before anything is awaited. If it raises, the
            aggregate rejects with that exception and mapping stops. Tasks
            already started for earlier coroutines are cancelled, and the
            coroutines not yet visited are closed.

    Returns:
        Future of the aggregated collection

    Raises:
        TypeError: If collection is not traversable

    Example:
        >>> await all_([1, resolved(2), 3])
        [1, 2, 3]
    """
    traversal = traverse(collection)
    slots = traversal.slots()
    loop = get_loop(value for _, value, _ in slots)
    aggregate: asyncio.Future[Any] = loop.create_future()
    # Seeded with 1 so nothing settles before every element is registered.
    record = SettlementRecord(remaining=1, results=traversal.container(slots))
    owned: list[asyncio.Future[Any]] = []

    def countdown() -> None:
        record.remaining -= 1
        if record.remaining == 0:
            results, _ = record.close()
            settle_future(aggregate, value=results)

    def on_rejected(reason: BaseException) -> None:
        if record.closed:
            _discard("all", reason)
            return
        record.close()
        settle_future(aggregate, reason=reason)

    def fulfil_slot(slot: Hashable) -> Callable[[Any], None]:
        def on_fulfilled(value: Any) -> None:
            if record.closed:
                _discard("all", value)
                return
            record.results[slot] = value
            countdown()
        return on_fulfilled

    for index, (slot, value, key) in enumerate(slots):
        if mapper is not None:
            try:
                value = mapper(value, key, traversal.collection)
            except Exception as exc:
                on_rejected(exc)
                _abandon(owned, (v for _, v, _ in slots[index:]))
                break
        if is_future(value):
            record.remaining += 1
            child = ensure_future(value, loop=loop)
            if child is not value:
                owned.append(child)
            subscribe(child, fulfil_slot(slot), on_rejected)
        else:
            record.results[slot] = value
        if record.closed:
            break

    if not record.closed:
        countdown()
    _cancel_owned_on_cancel(aggregate, record, owned)
    return aggregate


# ─────────────────────────────────────────────────────────────────────────────
# Some: first ``count`` successes
# ─────────────────────────────────────────────────────────────────────────────

def some(collection: Any, count: int) -> asyncio.Future[list[Any]]:
    """Wait for the first ``count`` elements to fulfil.

    Fulfils with those values in arrival order. Rejects with an
    AggregateError listing every rejection reason so far (arrival order) as
    soon as more than ``len(collection) - count`` elements have rejected.
    If ``count`` exceeds the collection size, success is impossible and the
    aggregate rejects once every element has settled. A ``count`` of zero or
    less fulfils immediately with an empty list.

    Args:
        collection: Values, futures, tasks or coroutines
        count: Number of fulfilments required

    Returns:
        Future of the list of fulfilment values

    Example:
        >>> await some([fail(), resolved(1), resolved(2)], 2)
        [1, 2]
    """
    slots = traverse(collection).slots()
    loop = get_loop(value for _, value, _ in slots)
    aggregate: asyncio.Future[list[Any]] = loop.create_future()
    total = len(slots)
    tolerated = total - count if count <= total else total
    record = SettlementRecord(remaining=count, results=[], errors=[])
    owned: list[asyncio.Future[Any]] = []

    def check_exhausted() -> None:
        if record.closed or len(record.results) + len(record.errors) < total:
            return
        _, errors = record.close()
        settle_future(aggregate, reason=AggregateError(errors or []))

    def on_fulfilled(value: Any) -> None:
        if record.closed:
            _discard("some", value)
            return
        record.results.append(value)
        record.remaining -= 1
        if record.remaining == 0:
            values, _ = record.close()
            settle_future(aggregate, value=values)
        else:
            check_exhausted()

    def on_rejected(reason: BaseException) -> None:
        if record.closed:
            _discard("some", reason)
            return
        record.errors.append(reason)
        if len(record.errors) > tolerated:
            _, errors = record.close()
            settle_future(aggregate, reason=AggregateError(errors or []))
        else:
            check_exhausted()

    if count <= 0:
        record.close()
        aggregate.set_result([])

    for _, value, _ in slots:
        child = ensure_future(value, loop=loop)
        if child is not value:
            owned.append(child)
        subscribe(child, on_fulfilled, on_rejected)

    if total == 0:
        check_exhausted()
    _cancel_owned_on_cancel(aggregate, record, owned)
    return aggregate


# ─────────────────────────────────────────────────────────────────────────────
# Settle: outcome of every element
# ─────────────────────────────────────────────────────────────────────────────

def reflect(value: Any) -> asyncio.Future[Inspection[Any]]:
    """Future of an Inspection of value's outcome. Never rejects.

    Example:
        >>> inspection = await reflect(rejected(ValueError("boom")))
        >>> inspection.is_rejected
        True
    """
    source = ensure_future(value)
    target: asyncio.Future[Inspection[Any]] = source.get_loop().create_future()
    subscribe(
        source,
        lambda v: settle_future(target, value=Inspection.fulfilled(v)),
        lambda r: settle_future(target, value=Inspection.rejected(r)),
    )
    return target


def inspect_future(future: asyncio.Future[T]) -> Inspection[T]:
    """Snapshot of a future's current state, pending included.

    A cancelled future reads as rejected with an asyncio.CancelledError.
    """
    if not future.done():
        return Inspection.pending()
    if future.cancelled():
        return Inspection.rejected(asyncio.CancelledError())
    exc = future.exception()
    return Inspection.rejected(exc) if exc is not None else Inspection.fulfilled(future.result())


def settle(collection: Any) -> asyncio.Future[Any]:
    """Wait for every element to settle, capturing each outcome.

    Like Promise.allSettled(): the aggregate never rejects and has the
    collection's shape, each slot holding an Inspection.

    Example:
        >>> results = await settle([risky_a(), risky_b()])
        >>> for r in results:
        ...     if r.is_fulfilled:
        ...         print(f"Success: {r.value()}")
        ...     else:
        ...         print(f"Failed: {r.reason()}")
    """
    return all_(collection, lambda value, key, coll: reflect(value))
