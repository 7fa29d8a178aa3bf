"""Tests for sequential iteration."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from types import SimpleNamespace

import pytest

from futuretoolbox import for_each, for_each_index, for_each_iter, for_each_key, for_each_own, rejected


@pytest.mark.asyncio
async def test_for_each_serializes_on_returned_futures() -> None:
    events: list[tuple[str, str]] = []

    async def action(value: str, key: object, coll: object) -> None:
        events.append(("start", value))
        await asyncio.sleep(0.01 if value == "a" else 0)
        events.append(("end", value))

    assert await for_each(["a", "b", "c"], action) is None
    assert events == [
        ("start", "a"), ("end", "a"),
        ("start", "b"), ("end", "b"),
        ("start", "c"), ("end", "c"),
    ]


@pytest.mark.asyncio
async def test_for_each_accepts_plain_return_values() -> None:
    seen: list[int] = []
    await for_each([1, 2, 3], lambda v, k, c: seen.append(v))
    assert seen == [1, 2, 3]


@pytest.mark.asyncio
async def test_for_each_rejection_stops_iteration() -> None:
    visited: list[str] = []

    def action(value: str, key: object, coll: object) -> object:
        visited.append(value)
        if value == "b":
            return rejected(ValueError("b failed"))
        return None

    with pytest.raises(ValueError, match="b failed"):
        await for_each(["a", "b", "c"], action)
    assert visited == ["a", "b"]


@pytest.mark.asyncio
async def test_for_each_sync_exception_stops_iteration() -> None:
    visited: list[int] = []

    def action(value: int, key: object, coll: object) -> None:
        visited.append(value)
        raise RuntimeError("sync failure")

    with pytest.raises(RuntimeError, match="sync failure"):
        await for_each([1, 2], action)
    assert visited == [1]


@pytest.mark.asyncio
async def test_for_each_passes_keys_and_collection() -> None:
    data = {"x": 1, "y": 2}
    seen: list[tuple[object, object, object]] = []
    await for_each(data, lambda v, k, c: seen.append((v, k, c is data)))
    assert seen == [(1, "x", True), (2, "y", True)]


@pytest.mark.asyncio
async def test_for_each_index_uses_positions() -> None:
    keys: list[object] = []
    await for_each_index(("a", "b"), lambda v, k, c: keys.append(k))
    assert keys == [0, 1]


@pytest.mark.asyncio
async def test_for_each_key_requires_mapping() -> None:
    with pytest.raises(TypeError):
        for_each_key(["a"], lambda v, k, c: None)

    keys: list[object] = []
    await for_each_key({"k": 1}, lambda v, k, c: keys.append(k))
    assert keys == ["k"]


@pytest.mark.asyncio
async def test_for_each_iter_pulls_lazily() -> None:
    log: list[str] = []

    def source() -> Iterator[int]:
        for n in range(3):
            log.append(f"pull {n}")
            yield n

    async def action(value: int, key: object, coll: object) -> None:
        assert key is None
        await asyncio.sleep(0)
        log.append(f"done {value}")

    await for_each_iter(source(), action)
    assert log == ["pull 0", "done 0", "pull 1", "done 1", "pull 2", "done 2"]


@pytest.mark.asyncio
async def test_for_each_own_walks_attributes() -> None:
    obj = SimpleNamespace(name="db", port=5432)
    seen: dict[object, object] = {}
    await for_each_own(obj, lambda v, k, c: seen.__setitem__(k, v))
    assert seen == {"name": "db", "port": 5432}


@pytest.mark.asyncio
async def test_for_each_empty_collection() -> None:
    calls: list[object] = []
    await for_each([], lambda v, k, c: calls.append(v))
    assert calls == []


@pytest.mark.asyncio
async def test_for_each_cancellation_stops_without_logging_failure(caplog: pytest.LogCaptureFixture) -> None:
    visited: list[int] = []

    async def action(value: int, key: object, coll: object) -> None:
        visited.append(value)
        await asyncio.sleep(10)

    with caplog.at_level(logging.DEBUG, logger="futuretoolbox.each"):
        fut = for_each([1, 2, 3], action)
        await asyncio.sleep(0)
        fut.cancel()
        with pytest.raises(asyncio.CancelledError):
            await fut
    assert visited == [1]
    assert "stopped at key" not in caplog.text
