"""Controller for hashing runs.

Translates intent events from HashView into runs on a ThreadJobRunner and
folds their progress and outcomes back into AppState.

Flow:
    1. User types, browses or drops a path -> view emits SelectPathEvent(phase="intent")
    2. Controller stores the path text; with auto hash on it starts a run
    3. Runner mints a token, starts hash_file on a worker thread and returns
       the RunHandle; AppState.begin_run marks the page busy right away
    4. Every ui.timer tick the runner drains outcomes and reports progress
    5. Outcomes go through AppState.reconcile, which drops stale tokens
    6. Controller emits HashStateChanged so views re-render
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from nicegui import ui

from hash256.core.outcome import HashCancelled, HashFailure, HashOutcome, HashResult
from hash256.core.progress import ProgressCounter, ProgressMessage
from hash256.core.reader import HashError, OpenError, ReadError, hash_file
from hash256.core.utils.logging import get_logger
from hash256.gui.app_config import AppConfig
from hash256.gui.bus import EventBus
from hash256.gui.config import DEFAULT_POLL_INTERVAL_S
from hash256.gui.events import (
    CancelHash,
    ClearHash,
    HashProgress,
    HashStateChanged,
    SelectPathEvent,
    SetAutoHash,
    SetUppercase,
    StartHash,
)
from hash256.gui.state import AppState
from hash256.gui.thread_job_runner import RunHandle, ThreadJobRunner, TimerFactory
from hash256.gui.window_utils import set_window_title_for_state

logger = get_logger(__name__)


def _default_timer_factory(interval_s: float, callback: Callable[[], None]) -> object:
    return ui.timer(interval_s, callback)


def outcome_from_exception(exc: BaseException) -> HashFailure:
    """Map a worker exception to a displayable failure."""
    if isinstance(exc, OpenError):
        return HashFailure(message=str(exc), kind="open")
    if isinstance(exc, ReadError):
        return HashFailure(message=str(exc), kind="read")
    if isinstance(exc, HashError):
        return HashFailure(message=str(exc), kind="internal")
    return HashFailure(message=f"Unexpected error: {exc}", kind="internal")


class HashController:
    """Owns the ThreadJobRunner and applies run outcomes to AppState.

    Attributes:
        _app_state: AppState instance to update.
        _bus: EventBus for intents (in) and state changes (out).
        _app_config: Optional AppConfig for display toggles and the poll interval.
        _runner: ThreadJobRunner producing HashResult values.
    """

    def __init__(
        self,
        app_state: AppState,
        bus: EventBus,
        app_config: AppConfig | None = None,
        *,
        ui_timer_factory: TimerFactory | None = None,
        poll_interval_s: float | None = None,
    ) -> None:
        self._app_state: AppState = app_state
        self._bus: EventBus = bus
        self._app_config: AppConfig | None = app_config
        self._timer_factory: TimerFactory = ui_timer_factory or _default_timer_factory
        # None: follow the config, so Options changes apply to the next run
        self._poll_interval_s: float | None = poll_interval_s
        self._runner: ThreadJobRunner[HashResult] = ThreadJobRunner()

        bus.subscribe_intent(SelectPathEvent, self._on_select_path)
        bus.subscribe_intent(StartHash, self._on_start_hash)
        bus.subscribe_intent(CancelHash, self._on_cancel)
        bus.subscribe_intent(ClearHash, self._on_clear)
        bus.subscribe_intent(SetUppercase, self._on_set_uppercase)
        bus.subscribe_intent(SetAutoHash, self._on_set_auto_hash)

    @property
    def runner(self) -> ThreadJobRunner[HashResult]:
        return self._runner

    @property
    def poll_interval_s(self) -> float:
        """Timer interval used for the next run."""
        if self._poll_interval_s is not None:
            return self._poll_interval_s
        if self._app_config is not None:
            return self._app_config.get_poll_interval_s()
        return DEFAULT_POLL_INTERVAL_S

    # ------------------------------------------------------------------
    # intent handlers
    # ------------------------------------------------------------------
    def _on_select_path(self, e: SelectPathEvent) -> None:
        previous = self._app_state.path_text
        self._app_state.path_text = e.path
        self._app_state.error = None
        logger.info(f"path selected ({e.origin.value}): {e.path!r}")
        self._bus.emit(SelectPathEvent(path=e.path, origin=e.origin, phase="state"))

        if self._app_state.auto_hash and e.path.strip():
            self.start_hash(previous_path_text=previous)
        else:
            self._emit_state()

    def _on_start_hash(self, e: StartHash) -> None:
        if not self._app_state.path_text.strip():
            logger.debug("StartHash ignored, empty path")
            return
        self.start_hash(previous_path_text=self._app_state.path_text)

    def _on_cancel(self, e: CancelHash) -> None:
        token = self._app_state.request_cancel()
        if token is None:
            return
        logger.info(f"cancel requested for run {token}")
        self._emit_state()

    def _on_clear(self, e: ClearHash) -> None:
        if self._app_state.is_running:
            logger.debug("ClearHash ignored while a run is active")
            return
        self._app_state.clear()
        self._emit_state()

    def _on_set_uppercase(self, e: SetUppercase) -> None:
        self._app_state.set_uppercase(e.value)
        if self._app_config is not None:
            self._app_config.set_uppercase(e.value)
        self._emit_state()

    def _on_set_auto_hash(self, e: SetAutoHash) -> None:
        self._app_state.auto_hash = bool(e.value)
        if self._app_config is not None:
            self._app_config.set_auto_hash(e.value)
        self._emit_state()

    # ------------------------------------------------------------------
    # runs
    # ------------------------------------------------------------------
    def start_hash(self, *, previous_path_text: Optional[str] = None) -> RunHandle:
        """Start hashing AppState.path_text, superseding any active run."""
        path = Path(self._app_state.path_text.strip())
        handle: Optional[RunHandle] = None

        def worker_fn(cancel_event, progress: ProgressCounter) -> HashResult:
            progress.path = path
            return hash_file(path, progress=progress, cancel_event=cancel_event)

        def on_progress(msg: ProgressMessage) -> None:
            if handle is not None:
                self._on_progress(handle.token, msg)

        def on_done(result: HashResult) -> None:
            self._apply(handle, result)

        def on_error(exc: BaseException, tb: str) -> None:
            failure = outcome_from_exception(exc)
            if failure.kind == "internal":
                logger.error(f"hash worker failed for {path}: {exc}\n{tb}")
            else:
                logger.warning(f"hash failed for {path}: {exc}")
            self._apply(handle, failure)

        def on_cancelled() -> None:
            logger.info(f"hash cancelled for {path}")
            self._apply(handle, HashCancelled())

        handle = self._runner.start(
            ui_timer_factory=self._timer_factory,
            poll_interval_s=self.poll_interval_s,
            worker_fn=worker_fn,
            on_progress=on_progress,
            on_done=on_done,
            on_error=on_error,
            on_cancelled=on_cancelled,
            cancel_previous=True,
        )
        self._app_state.begin_run(handle, previous_path_text)
        logger.info(f"run {handle.token} started: {path}")
        self._emit_state()
        return handle

    def _on_progress(self, token: int, msg: ProgressMessage) -> None:
        if not self._app_state.update_progress(token, msg):
            return
        self._bus.emit(HashProgress(token=token, progress=msg))
        set_window_title_for_state(self._app_state)

    def _apply(self, handle: Optional[RunHandle], outcome: HashOutcome) -> None:
        if handle is None:
            return
        if self._app_state.reconcile(handle.token, outcome):
            self._emit_state()

    def _emit_state(self) -> None:
        s = self._app_state
        set_window_title_for_state(s)
        self._bus.emit(HashStateChanged(is_running=s.is_running, token=s.active_token, error=s.error))

    def shutdown(self) -> None:
        """Request the active run to stop (app shutdown)."""
        self._runner.abandon()
