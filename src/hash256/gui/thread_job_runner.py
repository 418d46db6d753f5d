"""NiceGUI-friendly background thread runner with progress and cancellation.

Each `start()` mints a new job id (the run token), a fresh `ProgressCounter`
and a fresh cancel `threading.Event`, then launches the worker on a daemon
thread. The worker never touches the UI: it writes to its counter and posts
exactly one tagged outcome message to a queue. A UI timer drains the queue on
the NiceGUI event loop and drops every message whose job id is not the active
one, so a superseded run can never overwrite a newer result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union
import queue
import threading
import traceback

from hash256.core.progress import CancelledError as CoreCancelledError
from hash256.core.progress import ProgressCounter, ProgressMessage
from hash256.core.utils.logging import get_logger

logger = get_logger(__name__)

TResult = TypeVar("TResult")


class ThreadJobCancelled(Exception):
    """Raised by worker code to signal a UI-level cancellation."""


@dataclass(frozen=True)
class RunHandle:
    """Shared state of one run, handed back to the caller of `start()`.

    Attributes:
        token: Job id, strictly greater than every earlier id of the runner.
        progress: Counter written by the worker, read by the UI.
        cancel_event: Set once to request cancellation; never cleared.
    """

    token: int
    progress: ProgressCounter
    cancel_event: threading.Event

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def snapshot(self) -> ProgressMessage:
        return self.progress.snapshot()


@dataclass(frozen=True)
class DoneMsg(Generic[TResult]):
    job_id: int
    result: TResult


@dataclass(frozen=True)
class CancelledMsg:
    job_id: int


@dataclass(frozen=True)
class ErrorMsg:
    job_id: int
    exc: BaseException
    tb: str


WorkerMsg = Union[DoneMsg[TResult], CancelledMsg, ErrorMsg]

WorkerFn = Callable[[threading.Event, ProgressCounter], TResult]
OnProgress = Callable[[ProgressMessage], None]
OnDone = Callable[[TResult], None]
OnError = Callable[[BaseException, str], None]
OnCancelled = Callable[[], None]
TimerFactory = Callable[[float, Callable[[], None]], object]


class ThreadJobRunner(Generic[TResult]):
    """Run a background job while keeping NiceGUI UI updates on the main thread."""

    max_per_tick = 200

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_job_id: int = 0
        self._active_job_id: int = 0

        self._active: Optional[RunHandle] = None
        self._last_progress: Optional[ProgressMessage] = None
        self._thread: Optional[threading.Thread] = None
        self._q: "queue.Queue[WorkerMsg[TResult]]" = queue.Queue()

        self._on_progress: Optional[OnProgress] = None
        self._on_done: Optional[OnDone[TResult]] = None
        self._on_error: Optional[OnError] = None
        self._on_cancelled: Optional[OnCancelled] = None

        self._timer = None

    @property
    def active_job_id(self) -> int:
        with self._lock:
            return self._active_job_id

    @property
    def active_run(self) -> Optional[RunHandle]:
        with self._lock:
            return self._active

    def is_running(self) -> bool:
        t = self._thread
        return bool(t and t.is_alive())

    def cancel(self) -> None:
        """Request cancellation of the active run. Its outcome is still delivered."""
        with self._lock:
            handle = self._active
        if handle is not None:
            handle.cancel()

    def abandon(self) -> None:
        """Cancel the active run and forget it, so its outcome is dropped."""
        with self._lock:
            handle = self._active
            self._active = None
            self._active_job_id = 0
        if handle is not None:
            handle.cancel()
            logger.debug(f"abandoned job {handle.token}")

    def start(
        self,
        *,
        ui_timer_factory: TimerFactory,
        poll_interval_s: float,
        worker_fn: WorkerFn[TResult],
        on_progress: Optional[OnProgress] = None,
        on_done: Optional[OnDone[TResult]] = None,
        on_error: Optional[OnError] = None,
        on_cancelled: Optional[OnCancelled] = None,
        cancel_previous: bool = True,
    ) -> RunHandle:
        """Start a job and return its handle immediately.

        If cancel_previous=True, the run being superseded gets a cancel
        request so it stops competing for disk and CPU. Its outcome is
        ignored either way because its job id is no longer active.
        """
        with self._lock:
            self._next_job_id += 1
            job_id = self._next_job_id

            previous = self._active
            if cancel_previous and previous is not None:
                previous.cancel()
                logger.debug(f"job {job_id} supersedes job {previous.token}")

            handle = RunHandle(
                token=job_id,
                progress=ProgressCounter(),
                cancel_event=threading.Event(),
            )
            self._active_job_id = job_id
            self._active = handle
            self._last_progress = None

            self._on_progress = on_progress
            self._on_done = on_done
            self._on_error = on_error
            self._on_cancelled = on_cancelled

        self._ensure_timer(ui_timer_factory, poll_interval_s)

        t = threading.Thread(
            target=self._worker_entry,
            name=f"ThreadJobRunner-{job_id}",
            daemon=True,
            args=(handle, worker_fn),
        )
        self._thread = t
        t.start()
        return handle

    def _ensure_timer(self, ui_timer_factory: TimerFactory, poll_interval_s: float) -> None:
        self._stop_timer()
        self._timer = ui_timer_factory(poll_interval_s, self._poll_queue_once)

    def _worker_entry(self, handle: RunHandle, worker_fn: WorkerFn[TResult]) -> None:
        job_id = handle.token
        try:
            result = worker_fn(handle.cancel_event, handle.progress)

            if handle.cancel_event.is_set():
                self._q.put(CancelledMsg(job_id=job_id))
                return

            self._q.put(DoneMsg[TResult](job_id=job_id, result=result))

        except (ThreadJobCancelled, CoreCancelledError):
            self._q.put(CancelledMsg(job_id=job_id))
        except BaseException as exc:
            tb = traceback.format_exc()
            self._q.put(ErrorMsg(job_id=job_id, exc=exc, tb=tb))

    def _poll_queue_once(self) -> None:
        """Timer callback: drain outcomes, then report progress of the active run."""
        n = 0
        while n < self.max_per_tick:
            try:
                msg = self._q.get_nowait()
            except queue.Empty:
                break
            n += 1
            self._handle_msg(msg)

        self._emit_progress()

        if not self.is_running() and self._q.empty():
            self._stop_timer()

    def _emit_progress(self, *, force: bool = False) -> None:
        with self._lock:
            handle = self._active
            on_progress = self._on_progress
        if handle is None or on_progress is None:
            return
        snap = handle.snapshot()
        if not force and snap == self._last_progress:
            return
        self._last_progress = snap
        on_progress(snap)

    def _handle_msg(self, msg: WorkerMsg[TResult]) -> None:
        with self._lock:
            latest_id = self._active_job_id
            on_done = self._on_done
            on_error = self._on_error
            on_cancelled = self._on_cancelled

        if getattr(msg, "job_id", None) != latest_id:
            logger.debug(f"dropping stale {type(msg).__name__} for job {msg.job_id} (active={latest_id})")
            return

        # last progress of the run goes out before its outcome
        self._emit_progress()

        with self._lock:
            self._active = None

        if isinstance(msg, DoneMsg):
            if on_done:
                on_done(msg.result)
            return

        if isinstance(msg, CancelledMsg):
            if on_cancelled:
                on_cancelled()
            return

        if isinstance(msg, ErrorMsg):
            if on_error:
                on_error(msg.exc, msg.tb)
            return

    def _stop_timer(self) -> None:
        if self._timer is not None:
            try:
                self._timer.cancel()
            except Exception:
                logger.debug("ui timer cancel failed", exc_info=True)
            self._timer = None
