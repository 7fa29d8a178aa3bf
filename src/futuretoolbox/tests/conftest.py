"""Shared fixtures for futuretoolbox tests."""

from __future__ import annotations

import asyncio
import logging

import pytest

from futuretoolbox import clear_settings_cache


@pytest.fixture(autouse=True)
def clean_settings() -> object:
    """Reload settings from the environment around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
    logging.getLogger("futuretoolbox").setLevel(logging.NOTSET)


class StutteringFuture:
    """Already-fulfilled future-like object that reports its outcome twice."""

    _asyncio_future_blocking = False

    def __init__(self, loop: asyncio.AbstractEventLoop, value: object) -> None:
        self._loop = loop
        self._value = value

    def get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def add_done_callback(self, fn: object) -> None:
        self._loop.call_soon(fn, self)  # type: ignore[arg-type]
        self._loop.call_soon(fn, self)  # type: ignore[arg-type]

    def done(self) -> bool:
        return True

    def cancelled(self) -> bool:
        return False

    def exception(self) -> None:
        return None

    def result(self) -> object:
        return self._value

    def __await__(self) -> object:
        yield from ()
        return self._value


@pytest.fixture
def stuttering() -> type[StutteringFuture]:
    """Factory for futures that call their callbacks twice."""
    return StutteringFuture
