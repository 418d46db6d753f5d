"""Pytest fixtures for GUI tests."""

from __future__ import annotations

import time
from typing import Callable, Generator

import pytest

from hash256.gui.bus import BusConfig, EventBus
from hash256.gui.state import AppState
from hash256.gui.thread_job_runner import ThreadJobRunner


class DummyTimer:
    """Stand-in for ui.timer that is ticked by the test."""

    def __init__(self, cb: Callable[[], None]) -> None:
        self._cb = cb
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def tick(self) -> None:
        if not self.cancelled:
            self._cb()


class TimerFactory:
    """Records every timer a runner creates."""

    def __init__(self) -> None:
        self.timers: list[DummyTimer] = []
        self.intervals: list[float] = []

    def __call__(self, interval_s: float, cb: Callable[[], None]) -> DummyTimer:
        t = DummyTimer(cb)
        self.timers.append(t)
        self.intervals.append(interval_s)
        return t

    def tick(self) -> None:
        for t in list(self.timers):
            t.tick()


def drain(runner: ThreadJobRunner, timers: TimerFactory, timeout_s: float = 5.0) -> None:
    """Tick timers until the runner's thread is done and its queue is empty."""
    start = time.time()
    while True:
        timers.tick()
        if not runner.is_running() and runner._q.empty():
            break
        if time.time() - start > timeout_s:
            break
        time.sleep(0.01)
    timers.tick()


@pytest.fixture
def bus() -> Generator[EventBus, None, None]:
    """EventBus created directly, outside any NiceGUI client context."""
    yield EventBus(client_id="test-client", config=BusConfig(trace=False))


@pytest.fixture
def app_state() -> Generator[AppState, None, None]:
    yield AppState()


@pytest.fixture
def timers() -> TimerFactory:
    return TimerFactory()


@pytest.fixture
def drain_runner(timers: TimerFactory) -> Callable[..., None]:
    """drain(runner) bound to the test's TimerFactory."""

    def _drain(runner: ThreadJobRunner, timeout_s: float = 5.0) -> None:
        drain(runner, timers, timeout_s)

    return _drain
