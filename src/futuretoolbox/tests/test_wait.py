"""Tests for the aggregation combinators.

Validates:
- all_: shape preservation, first-rejection-wins, eager mapping
- some: arrival order, impossibility detection, count edge cases
- settle/reflect: outcomes captured as Inspections
- Settlement guards against duplicate and late callbacks
"""

from __future__ import annotations

import asyncio
import inspect
import logging

import pytest

from futuretoolbox import (
    AggregateError,
    Inspection,
    InspectionError,
    all_,
    inspect_future,
    reflect,
    rejected,
    resolved,
    settle,
    some,
)
from futuretoolbox.runtime.concurrency.wait import SettlementRecord


def _pending(n: int) -> list[asyncio.Future[object]]:
    loop = asyncio.get_running_loop()
    return [loop.create_future() for _ in range(n)]


async def _double(x: int) -> int:
    await asyncio.sleep(0)
    return x * 2


# ─────────────────────────────────────────────────────────────────────────────
# all_
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_all_mixes_values_and_futures() -> None:
    assert await all_([1, resolved(2), 3]) == [1, 2, 3]


@pytest.mark.asyncio
async def test_all_accepts_coroutines() -> None:
    assert await all_((_double(1), _double(2))) == [2, 4]


@pytest.mark.asyncio
async def test_all_preserves_mapping_shape_and_key_order() -> None:
    a, b = _pending(2)
    agg = all_({"first": a, "second": b, "third": 3})
    b.set_result("B")
    await asyncio.sleep(0)
    a.set_result("A")
    assert await agg == {"first": "A", "second": "B", "third": 3}
    assert list((await agg).keys()) == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_all_lazy_iterable_aggregates_to_list() -> None:
    assert await all_(resolved(n) for n in range(3)) == [0, 1, 2]


@pytest.mark.asyncio
async def test_all_empty_collections() -> None:
    assert await all_([]) == []
    assert await all_({}) == {}


@pytest.mark.asyncio
async def test_all_first_rejection_by_completion_order_wins() -> None:
    a, b, c = _pending(3)
    agg = all_([a, b, c])
    c.set_exception(ValueError("index 2"))
    await asyncio.sleep(0)
    a.set_exception(KeyError("index 0"))
    b.set_result("late")

    with pytest.raises(ValueError, match="index 2"):
        await agg


@pytest.mark.asyncio
async def test_all_mapper_applied_eagerly_before_awaiting() -> None:
    calls: list[object] = []

    def mapper(value: int, key: object, coll: object) -> object:
        calls.append(key)
        return _double(value)

    agg = all_([1, 2, 3], mapper)
    assert calls == [0, 1, 2]
    assert await agg == [2, 4, 6]


@pytest.mark.asyncio
async def test_all_mapper_receives_collection() -> None:
    data = {"a": 1}
    seen: list[object] = []
    await all_(data, lambda v, k, c: seen.append(c))
    assert seen == [data]


@pytest.mark.asyncio
async def test_all_sync_mapper_failure_rejects_and_stops_mapping() -> None:
    calls: list[int] = []

    def mapper(value: int, key: object, coll: object) -> int:
        calls.append(value)
        if value == 2:
            raise RuntimeError("bad element")
        return value

    with pytest.raises(RuntimeError, match="bad element"):
        await all_([1, 2, 3], mapper)
    assert calls == [1, 2]


@pytest.mark.asyncio
async def test_all_mapper_failure_stops_started_and_unvisited_coroutines() -> None:
    progress: list[object] = []

    async def job(n: int) -> int:
        progress.append(n)
        await asyncio.sleep(0)
        progress.append(f"done{n}")
        return n

    def mapper(value: object, key: object, coll: object) -> object:
        if key == 1:
            raise ValueError("bad key")
        return value

    jobs = [job(0), job(1), job(2)]
    with pytest.raises(ValueError, match="bad key"):
        await all_(jobs, mapper)
    await asyncio.sleep(0.01)

    assert progress == []
    assert all(inspect.getcoroutinestate(j) == inspect.CORO_CLOSED for j in jobs)


@pytest.mark.asyncio
async def test_all_ignores_duplicate_child_callbacks(stuttering: type) -> None:
    (slow,) = _pending(1)
    agg = all_([stuttering(asyncio.get_running_loop(), 1), slow])
    for _ in range(3):
        await asyncio.sleep(0)
    assert not agg.done()

    slow.set_result(2)
    assert await agg == [1, 2]


@pytest.mark.asyncio
async def test_all_cancelled_child_cancels_aggregate() -> None:
    a, b = _pending(2)
    agg = all_([a, b])
    a.cancel()
    with pytest.raises(asyncio.CancelledError):
        await agg


@pytest.mark.asyncio
async def test_cancelling_all_cancels_owned_tasks() -> None:
    cancelled: list[bool] = []

    async def forever() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    agg = all_([forever()])
    await asyncio.sleep(0)
    agg.cancel()
    for _ in range(3):
        await asyncio.sleep(0)
    assert cancelled == [True]


@pytest.mark.asyncio
async def test_all_logs_late_outcomes(caplog: pytest.LogCaptureFixture) -> None:
    a, b = _pending(2)
    agg = all_([a, b])
    a.set_exception(ValueError("first"))
    await asyncio.sleep(0)

    with caplog.at_level(logging.DEBUG, logger="futuretoolbox.wait"):
        b.set_result("late")
        await asyncio.sleep(0)
    assert "discarding outcome" in caplog.text
    with pytest.raises(ValueError):
        await agg


def test_all_rejects_non_collections() -> None:
    with pytest.raises(TypeError):
        all_(42)
    with pytest.raises(TypeError, match="'str'"):
        all_("abc")


# ─────────────────────────────────────────────────────────────────────────────
# some
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_some_fulfils_in_arrival_order() -> None:
    a, b, c = _pending(3)
    agg = some([a, b, c], 2)
    c.set_result("c")
    await asyncio.sleep(0)
    a.set_result("a")
    await asyncio.sleep(0)
    b.set_result("b")
    assert await agg == ["c", "a"]


@pytest.mark.asyncio
async def test_some_tolerates_failures_while_success_possible() -> None:
    a, b, c = _pending(3)
    agg = some([a, b, c], 2)
    a.set_exception(ValueError("a"))
    await asyncio.sleep(0)
    assert not agg.done()

    b.set_result("b")
    c.set_result("c")
    assert await agg == ["b", "c"]


@pytest.mark.asyncio
async def test_some_rejects_once_success_impossible() -> None:
    a, b, c = _pending(3)
    agg = some([a, b, c], 2)
    e1, e2 = ValueError("a"), KeyError("b")
    a.set_exception(e1)
    await asyncio.sleep(0)
    b.set_exception(e2)

    with pytest.raises(AggregateError) as info:
        await agg
    assert info.value.errors == [e1, e2]
    assert not c.done()


@pytest.mark.asyncio
async def test_some_count_zero_fulfils_immediately() -> None:
    agg = some([resolved(1)], 0)
    assert agg.done()
    assert await agg == []


@pytest.mark.asyncio
async def test_some_count_above_size_rejects_after_all_settle() -> None:
    a, b = _pending(2)
    err = ValueError("a")
    agg = some([a, b], 3)
    a.set_exception(err)
    await asyncio.sleep(0)
    assert not agg.done()

    b.set_result("b")
    with pytest.raises(AggregateError) as info:
        await agg
    assert info.value.errors == [err]


@pytest.mark.asyncio
async def test_some_empty_collection_cannot_succeed() -> None:
    with pytest.raises(AggregateError) as info:
        await some([], 1)
    assert info.value.errors == []


@pytest.mark.asyncio
async def test_some_ignores_late_arrivals() -> None:
    a, b = _pending(2)
    agg = some([a, b], 1)
    a.set_result("a")
    await asyncio.sleep(0)
    b.set_exception(ValueError("late"))
    await asyncio.sleep(0)
    assert await agg == ["a"]


# ─────────────────────────────────────────────────────────────────────────────
# settle / reflect / inspection
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_settle_never_rejects() -> None:
    err = ValueError("boom")
    results = await settle([resolved(1), rejected(err), 3])

    assert [r.is_fulfilled for r in results] == [True, False, True]
    assert results[1].is_rejected and results[1].reason() is err
    assert results[2].value() == 3
    assert not any(r.is_pending for r in results)
    assert all(r.is_resolved for r in results)


@pytest.mark.asyncio
async def test_settle_preserves_mapping_shape() -> None:
    assert await settle({}) == {}
    results = await settle({"ok": resolved("v"), "bad": rejected(KeyError())})
    assert results["ok"].value() == "v"
    assert isinstance(results["bad"].reason(), KeyError)


@pytest.mark.asyncio
async def test_settle_waits_for_every_element() -> None:
    a, b = _pending(2)
    agg = settle([a, b])
    a.set_exception(ValueError())
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert not agg.done()
    b.set_result(2)
    assert (await agg)[1].value() == 2


@pytest.mark.asyncio
async def test_reflect_captures_cancellation() -> None:
    (fut,) = _pending(1)
    inspection_fut = reflect(fut)
    fut.cancel()
    inspection = await inspection_fut
    assert inspection.is_rejected
    assert isinstance(inspection.reason(), asyncio.CancelledError)


@pytest.mark.asyncio
async def test_inspect_future_snapshot() -> None:
    (fut,) = _pending(1)
    assert inspect_future(fut).is_pending
    assert not inspect_future(fut).is_resolved
    fut.set_result("done")
    assert inspect_future(fut).value() == "done"


def test_inspection_accessors_report_absence() -> None:
    ok = Inspection.fulfilled(1)
    bad = Inspection.rejected(ValueError("x"))

    with pytest.raises(InspectionError):
        ok.reason()
    with pytest.raises(InspectionError):
        bad.value()
    with pytest.raises(InspectionError, match="pending"):
        Inspection.pending().value()
    with pytest.raises(ValueError, match="x"):
        bad.unwrap()
    assert bad.unwrap_or(0) == 0
    assert ok.unwrap() == 1


def test_settlement_record_close_is_idempotent() -> None:
    record = SettlementRecord(remaining=2, results=[None, None], errors=[])
    assert not record.closed
    assert record.close() == ([None, None], [])
    assert record.closed
    assert record.close() == (None, None)
