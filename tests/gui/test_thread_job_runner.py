from __future__ import annotations

import threading
import time

from hash256.core.progress import CancelledError, ProgressMessage
from hash256.gui.thread_job_runner import ThreadJobCancelled, ThreadJobRunner


def test_thread_job_runner_progress_and_done(timers, drain_runner) -> None:
    runner: ThreadJobRunner[int] = ThreadJobRunner()
    progress_msgs: list[ProgressMessage] = []
    events: list[str] = []
    done_values: list[int] = []

    def worker_fn(cancel_event, progress):
        progress.total = 10
        progress.publish(5)
        progress.publish(10)
        return 42

    def on_progress(msg):
        progress_msgs.append(msg)
        events.append("progress")

    def on_done(result):
        done_values.append(result)
        events.append("done")

    handle = runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=worker_fn,
        on_progress=on_progress,
        on_done=on_done,
    )

    assert handle.token == 1
    assert timers.intervals == [0.01]
    drain_runner(runner)

    assert done_values == [42]
    # the final progress value arrives before the outcome
    assert events[-1] == "done"
    assert progress_msgs[-1].done == 10
    assert progress_msgs[-1].total == 10
    assert all(a.done <= b.done for a, b in zip(progress_msgs, progress_msgs[1:]))
    assert timers.timers[-1].cancelled


def test_tokens_strictly_increase(timers, drain_runner) -> None:
    runner: ThreadJobRunner[int] = ThreadJobRunner()
    tokens = []
    for _ in range(3):
        handle = runner.start(ui_timer_factory=timers, poll_interval_s=0.01, worker_fn=lambda c, p: 0)
        tokens.append(handle.token)
        drain_runner(runner)
    assert tokens == [1, 2, 3]
    assert runner.active_job_id == 3


def test_thread_job_runner_cancelled(timers, drain_runner) -> None:
    runner: ThreadJobRunner[int] = ThreadJobRunner()
    cancelled: list[bool] = []
    done: list[int] = []

    def worker_fn(cancel_event, progress):
        while not cancel_event.is_set():
            time.sleep(0.005)
        return 0

    handle = runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=worker_fn,
        on_done=done.append,
        on_cancelled=lambda: cancelled.append(True),
    )
    runner.cancel()
    assert handle.is_cancelled
    drain_runner(runner)

    assert cancelled == [True]
    assert done == []


def test_cancel_exceptions_map_to_cancelled(timers, drain_runner) -> None:
    for exc_type in (CancelledError, ThreadJobCancelled):
        runner: ThreadJobRunner[int] = ThreadJobRunner()
        cancelled: list[bool] = []
        errors: list[BaseException] = []

        def worker_fn(cancel_event, progress, exc_type=exc_type):
            raise exc_type("stop")

        runner.start(
            ui_timer_factory=timers,
            poll_interval_s=0.01,
            worker_fn=worker_fn,
            on_cancelled=lambda: cancelled.append(True),
            on_error=lambda exc, tb: errors.append(exc),
        )
        drain_runner(runner)
        assert cancelled == [True]
        assert errors == []


def test_thread_job_runner_error(timers, drain_runner) -> None:
    runner: ThreadJobRunner[int] = ThreadJobRunner()
    errors: list[tuple[BaseException, str]] = []

    def worker_fn(cancel_event, progress):
        raise ValueError("boom")

    runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=worker_fn,
        on_error=lambda exc, tb: errors.append((exc, tb)),
    )
    drain_runner(runner)

    assert len(errors) == 1
    assert isinstance(errors[0][0], ValueError)
    assert "ValueError: boom" in errors[0][1]


def test_superseded_job_is_cancelled_and_its_result_dropped(timers, drain_runner) -> None:
    runner: ThreadJobRunner[str] = ThreadJobRunner()
    gate = threading.Event()
    first_results: list[str] = []
    second_results: list[str] = []
    first_cancelled: list[bool] = []

    def slow_worker(cancel_event, progress):
        gate.wait(5)
        # ignores its cancel flag on purpose
        return "first"

    first = runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=slow_worker,
        on_done=first_results.append,
        on_cancelled=lambda: first_cancelled.append(True),
    )
    first_thread = runner._thread

    second = runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=lambda c, p: "second",
        on_done=second_results.append,
    )

    assert second.token > first.token
    assert first.is_cancelled
    assert not second.is_cancelled

    drain_runner(runner)
    gate.set()
    first_thread.join(5)
    runner._poll_queue_once()

    assert second_results == ["second"]
    assert first_results == []
    assert first_cancelled == []
    assert runner._q.empty()


def test_abandon_drops_the_outcome(timers, drain_runner) -> None:
    runner: ThreadJobRunner[int] = ThreadJobRunner()
    seen: list[str] = []

    def worker_fn(cancel_event, progress):
        cancel_event.wait(5)
        return 1

    handle = runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=worker_fn,
        on_done=lambda r: seen.append("done"),
        on_cancelled=lambda: seen.append("cancelled"),
    )
    runner.abandon()
    assert handle.is_cancelled
    assert runner.active_run is None
    drain_runner(runner)
    assert seen == []


def test_progress_is_not_repeated_when_unchanged(timers) -> None:
    runner: ThreadJobRunner[int] = ThreadJobRunner()
    gate = threading.Event()
    msgs: list[ProgressMessage] = []

    def worker_fn(cancel_event, progress):
        progress.publish(3)
        gate.wait(5)
        return 0

    handle = runner.start(
        ui_timer_factory=timers,
        poll_interval_s=0.01,
        worker_fn=worker_fn,
        on_progress=msgs.append,
    )
    deadline = time.time() + 5
    while handle.progress.processed < 3 and time.time() < deadline:
        time.sleep(0.005)
    timers.tick()
    timers.tick()
    gate.set()
    assert [m.done for m in msgs] == [3]
