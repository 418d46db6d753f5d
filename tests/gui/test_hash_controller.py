"""HashController tests with a real ThreadJobRunner and hand-ticked timers."""

from __future__ import annotations

import hashlib
import threading
from pathlib import Path
from typing import Generator

import pytest

from hash256.core.outcome import HashResult
from hash256.core.progress import CancelledError
from hash256.gui.app_config import AppConfig
from hash256.gui.bus import EventBus
from hash256.gui.controllers import hash_controller as hc
from hash256.gui.controllers.hash_controller import HashController, outcome_from_exception
from hash256.core.reader import HashError, OpenError, ReadError
from hash256.gui.events import (
    CancelHash,
    ClearHash,
    HashProgress,
    HashStateChanged,
    PathOrigin,
    SelectPathEvent,
    SetAutoHash,
    SetUppercase,
    StartHash,
)
from hash256.gui.state import AppState

ABC_HEX = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


@pytest.fixture(autouse=True)
def _no_window_title(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(hc, "set_window_title_for_state", lambda _state: None)


@pytest.fixture
def controller(app_state: AppState, bus: EventBus, timers) -> Generator[HashController, None, None]:
    ctrl = HashController(app_state, bus, ui_timer_factory=timers, poll_interval_s=0.01)
    yield ctrl
    ctrl.shutdown()


def _fake_result(tag: str) -> HashResult:
    return HashResult(hex=tag * 64, base64=tag, elapsed_s=0.01, bytes_processed=1)


def test_select_path_auto_hashes(controller, app_state, bus, make_file, drain_runner) -> None:
    states: list[HashStateChanged] = []
    bus.subscribe_state(HashStateChanged, states.append)
    path = make_file("abc.txt", b"abc")

    bus.emit(SelectPathEvent(path=str(path), origin=PathOrigin.BROWSE))
    assert app_state.is_running
    assert states[-1].is_running and states[-1].token == 1

    drain_runner(controller.runner)

    assert not app_state.is_running
    assert app_state.hex_digest == ABC_HEX
    assert app_state.result_path == path
    assert app_state.error is None
    assert states[-1].is_running is False


def test_large_file_reports_progress(controller, app_state, bus, make_file, big_payload, drain_runner) -> None:
    progress: list[HashProgress] = []
    bus.subscribe_state(HashProgress, progress.append)
    path = make_file("big.bin", big_payload)

    bus.emit(SelectPathEvent(path=str(path)))
    drain_runner(controller.runner)

    assert app_state.hex_digest == hashlib.sha256(big_payload).hexdigest()
    assert progress
    assert progress[-1].progress.done == len(big_payload)
    assert progress[-1].progress.total == len(big_payload)


def test_missing_file_sets_error_and_clears_output(controller, app_state, bus, make_file, tmp_path, drain_runner) -> None:
    bus.emit(SelectPathEvent(path=str(make_file("abc.txt", b"abc"))))
    drain_runner(controller.runner)
    assert app_state.has_result

    bus.emit(SelectPathEvent(path=str(tmp_path / "gone.bin")))
    drain_runner(controller.runner)

    assert app_state.error is not None
    assert app_state.error.startswith("Failed to open file")
    assert not app_state.has_result
    assert app_state.meta_text() == app_state.error


def test_path_with_nul_byte_is_an_open_error(controller, app_state, bus, drain_runner) -> None:
    bus.emit(SelectPathEvent(path="bad\x00name.bin"))
    drain_runner(controller.runner)

    assert not app_state.is_running
    assert app_state.error.startswith("Failed to open file")


def test_unexpected_worker_error_is_reported(controller, app_state, bus, monkeypatch, drain_runner) -> None:
    def boom(path, *, progress=None, cancel_event=None):
        raise ZeroDivisionError("boom")

    monkeypatch.setattr(hc, "hash_file", boom)
    bus.emit(SelectPathEvent(path="whatever.bin"))
    drain_runner(controller.runner)
    assert app_state.error == "Unexpected error: boom"


def test_cancel_restores_path_and_keeps_previous_output(
    controller, app_state, bus, make_file, monkeypatch, drain_runner
) -> None:
    first = make_file("abc.txt", b"abc")
    bus.emit(SelectPathEvent(path=str(first)))
    drain_runner(controller.runner)
    assert app_state.hex_digest == ABC_HEX

    def blocking(path, *, progress=None, cancel_event=None):
        cancel_event.wait(5)
        raise CancelledError()

    monkeypatch.setattr(hc, "hash_file", blocking)
    bus.emit(SelectPathEvent(path="slow.iso"))
    assert app_state.path_text == "slow.iso"
    assert app_state.is_running

    bus.emit(CancelHash())
    assert app_state.path_text == str(first)
    assert app_state.is_cancelling

    drain_runner(controller.runner)
    assert not app_state.is_running
    assert app_state.error is None
    assert app_state.hex_digest == ABC_HEX


def test_cancel_when_idle_does_nothing(controller, app_state, bus) -> None:
    states: list[HashStateChanged] = []
    bus.subscribe_state(HashStateChanged, states.append)
    bus.emit(CancelHash())
    assert states == []


def test_new_selection_supersedes_running_hash(controller, app_state, bus, monkeypatch, drain_runner) -> None:
    gate = threading.Event()
    a_started = threading.Event()
    cancel_events: dict[str, threading.Event] = {}
    slow_threads: list[threading.Thread] = []

    def fake_hash_file(path, *, progress=None, cancel_event=None):
        cancel_events[path.name] = cancel_event
        if path.name == "a.bin":
            slow_threads.append(threading.current_thread())
            a_started.set()
            gate.wait(5)
            return _fake_result("a")
        return _fake_result("b")

    monkeypatch.setattr(hc, "hash_file", fake_hash_file)

    bus.emit(SelectPathEvent(path="a.bin"))
    assert a_started.wait(5)
    bus.emit(SelectPathEvent(path="b.bin"))
    drain_runner(controller.runner)

    assert app_state.hex_digest == "b" * 64
    assert app_state.path_text == "b.bin"
    assert cancel_events["a.bin"].is_set()
    assert not cancel_events["b.bin"].is_set()

    # the superseded run finishes late and must not overwrite anything
    gate.set()
    slow_threads[0].join(5)
    controller.runner._poll_queue_once()
    assert app_state.hex_digest == "b" * 64
    assert not app_state.is_running


def test_auto_hash_off_waits_for_start(controller, app_state, bus, make_file, drain_runner) -> None:
    bus.emit(SetAutoHash(value=False))
    path = make_file("abc.txt", b"abc")

    bus.emit(SelectPathEvent(path=str(path)))
    assert not app_state.is_running
    assert controller.runner.active_job_id == 0

    bus.emit(StartHash())
    drain_runner(controller.runner)
    assert app_state.hex_digest == ABC_HEX


def test_start_with_empty_path_is_ignored(controller, app_state, bus) -> None:
    bus.emit(StartHash())
    bus.emit(SelectPathEvent(path="   "))
    assert controller.runner.active_job_id == 0
    assert not app_state.is_running


def test_clear_is_ignored_while_running(controller, app_state, bus, monkeypatch, drain_runner) -> None:
    def blocking(path, *, progress=None, cancel_event=None):
        cancel_event.wait(5)
        raise CancelledError()

    monkeypatch.setattr(hc, "hash_file", blocking)
    bus.emit(SelectPathEvent(path="slow.iso"))
    bus.emit(ClearHash())
    assert app_state.path_text == "slow.iso"

    bus.emit(CancelHash())
    drain_runner(controller.runner)
    bus.emit(ClearHash())
    assert app_state.path_text == ""


def test_display_toggles_persist_to_config(app_state, bus, timers, tmp_path: Path) -> None:
    cfg = AppConfig.load(config_path=tmp_path / "app_config.json")
    ctrl = HashController(app_state, bus, cfg, ui_timer_factory=timers)
    assert ctrl.poll_interval_s == cfg.get_poll_interval_s()

    bus.emit(SetUppercase(value=True))
    bus.emit(SetAutoHash(value=False))

    assert app_state.uppercase is True
    assert app_state.auto_hash is False
    assert cfg.get_uppercase() is True
    assert cfg.get_auto_hash() is False


def test_poll_interval_change_applies_to_next_run(
    app_state, bus, timers, monkeypatch, drain_runner, tmp_path: Path
) -> None:
    cfg = AppConfig.load(config_path=tmp_path / "app_config.json")
    ctrl = HashController(app_state, bus, cfg, ui_timer_factory=timers)
    monkeypatch.setattr(hc, "hash_file", lambda path, *, progress=None, cancel_event=None: _fake_result("a"))

    bus.emit(SelectPathEvent(path="a.bin"))
    drain_runner(ctrl.runner)
    cfg.set_attribute("poll_interval_ms", 40)
    bus.emit(SelectPathEvent(path="b.bin"))
    drain_runner(ctrl.runner)

    assert timers.intervals == [0.1, 0.04]
    ctrl.shutdown()


def test_outcome_from_exception() -> None:
    assert outcome_from_exception(OpenError("Failed to open file: x")).kind == "open"
    assert outcome_from_exception(ReadError("Failed to read file: x")).kind == "read"
    assert outcome_from_exception(HashError("odd")).message == "odd"
    assert outcome_from_exception(ValueError("bad")).message == "Unexpected error: bad"
