"""tests/conftest.py — Shared fixtures."""

from __future__ import annotations

import asyncio

import pytest

from sessionctl.kernel.controller import SessionController
from sessionctl.memory.flags import FirstRunFlags, InMemoryKeyValueStore, SQLiteKeyValueStore
from sessionctl.models.types import ControllerConfig


class RecordingSleep:
    """Stands in for asyncio.sleep: records each delay, yields once to the loop."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)
        await asyncio.sleep(0)

    def take(self):
        out, self.delays = self.delays, []
        return out


class CountingFlags(FirstRunFlags):
    def __init__(self, store):
        super().__init__(store)
        self.mark_calls = 0
        self.clear_calls = 0

    def mark_first_run_complete(self):
        self.mark_calls += 1
        super().mark_first_run_complete()

    def clear_first_run_flag(self):
        self.clear_calls += 1
        super().clear_first_run_flag()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def fresh_flags():
    return CountingFlags(InMemoryKeyValueStore())


@pytest.fixture
def completed_flags():
    flags = CountingFlags(InMemoryKeyValueStore())
    flags.mark_first_run_complete()
    flags.mark_calls = 0
    return flags


@pytest.fixture
def tmp_store(tmp_path):
    s = SQLiteKeyValueStore(str(tmp_path / "test.db"))
    yield s
    s.close()


def make_controller(flags, sleep, time_unit=1.0):
    return SessionController(flags, config=ControllerConfig(time_unit=time_unit), sleep=sleep)


@pytest.fixture
def make(sleep):
    """Factory: controller bound to the recording sleep."""
    def _make(flags, time_unit=1.0):
        return make_controller(flags, sleep, time_unit=time_unit)
    return _make
