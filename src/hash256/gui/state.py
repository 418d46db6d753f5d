"""GUI state for the hashing page.

AppState is the one mutable state object owned by the NiceGUI control loop.
Worker threads never touch it; they only write to their run's
ProgressCounter and post outcomes, which reach AppState through
`reconcile()` on the UI thread.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from hash256.core.outcome import HashCancelled, HashFailure, HashOutcome, HashResult
from hash256.core.progress import ProgressMessage
from hash256.core.utils.formatting import format_meta_line, format_percent
from hash256.core.utils.logging import get_logger
from hash256.gui.thread_job_runner import RunHandle

logger = get_logger(__name__)


class AppState:
    """State of the hashing page.

    Attributes:
        path_text: Contents of the path field.
        hex_digest: Last successful digest in lower-case hex ("" if none).
        base64_digest: Last successful digest in Base64 ("" if none).
        elapsed_s: Elapsed seconds of the last successful run.
        bytes_processed: Byte count of the last successful run.
        result_path: Path of the last successful run.
        error: Message of the last failed run, cleared when a run starts.
        is_running: A run has been requested and its outcome not yet applied.
        is_cancelling: Cancel was requested for the active run.
        active_token: Token of the active run, None when idle.
        active_run: Progress/cancel handles of the active run.
        uppercase: Display hex in upper case.
        auto_hash: Start a run as soon as a path is selected.
        previous_path_text: Path text before the active run was requested.
    """

    def __init__(self, *, uppercase: bool = False, auto_hash: bool = True) -> None:
        self.path_text: str = ""

        self.hex_digest: str = ""
        self.base64_digest: str = ""
        self.elapsed_s: Optional[float] = None
        self.bytes_processed: Optional[int] = None
        self.result_path: Optional[Path] = None
        self.error: Optional[str] = None

        self.is_running: bool = False
        self.is_cancelling: bool = False
        self.active_token: Optional[int] = None
        self.active_run: Optional[RunHandle] = None
        self.progress: Optional[ProgressMessage] = None
        self.previous_path_text: Optional[str] = None

        self.uppercase: bool = uppercase
        self.auto_hash: bool = auto_hash

    # ------------------------------------------------------------------
    # display helpers
    # ------------------------------------------------------------------
    @property
    def displayed_hex(self) -> str:
        """Hex digest in the case chosen by the uppercase preference."""
        return self.hex_digest.upper() if self.uppercase else self.hex_digest

    @property
    def has_result(self) -> bool:
        return bool(self.hex_digest)

    def meta_text(self) -> str:
        """Meta line under the digests: error, then run status, then last result."""
        if self.error:
            return self.error
        if self.is_running:
            return "Cancelling..." if self.is_cancelling else "Hashing..."
        if self.elapsed_s is not None and self.bytes_processed is not None:
            return format_meta_line(self.bytes_processed, self.elapsed_s)
        return ""

    def progress_percent(self) -> Optional[str]:
        if not self.is_running or self.progress is None:
            return None
        return format_percent(self.progress.done, self.progress.total)

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------
    def set_uppercase(self, value: bool) -> None:
        """Change the hex display case. The stored digest is not touched."""
        self.uppercase = bool(value)

    def begin_run(self, handle: RunHandle, previous_path_text: Optional[str] = None) -> None:
        """Mark a run as requested. Clears the previous error immediately."""
        self.is_running = True
        self.is_cancelling = False
        self.error = None
        self.active_token = handle.token
        self.active_run = handle
        self.progress = handle.snapshot()
        self.previous_path_text = previous_path_text
        logger.debug(f"run {handle.token} started for {self.path_text!r}")

    def update_progress(self, token: int, progress: ProgressMessage) -> bool:
        """Store a progress snapshot if it belongs to the active run."""
        if token != self.active_token:
            return False
        self.progress = progress
        return True

    def request_cancel(self) -> Optional[int]:
        """Set the active run's cancel flag and restore the previous path text.

        The run stays active until its Cancelled outcome is reconciled.
        Returns the cancelled token, or None if nothing was running.
        """
        if not self.is_running or self.active_run is None:
            return None
        self.active_run.cancel()
        self.is_cancelling = True
        if self.previous_path_text is not None:
            self.path_text = self.previous_path_text
        elif self.result_path is not None:
            self.path_text = str(self.result_path)
        self.previous_path_text = None
        return self.active_token

    def reconcile(self, token: int, outcome: HashOutcome) -> bool:
        """Apply an outcome if it belongs to the active run.

        Outcomes of superseded or abandoned runs are dropped without touching
        any state. Returns True when the outcome was applied.
        """
        if self.active_token is None or token != self.active_token:
            logger.debug(f"discarding stale outcome for run {token} (active={self.active_token})")
            return False

        self.is_running = False
        self.is_cancelling = False
        self.active_token = None
        self.active_run = None
        self.progress = None
        self.previous_path_text = None

        if isinstance(outcome, HashResult):
            self.error = None
            self.hex_digest = outcome.hex.lower()
            self.base64_digest = outcome.base64
            self.elapsed_s = outcome.elapsed_s
            self.bytes_processed = outcome.bytes_processed
            self.result_path = outcome.path
        elif isinstance(outcome, HashFailure):
            self.error = outcome.message
            self._clear_output()
        elif isinstance(outcome, HashCancelled):
            self.error = None
        else:
            raise TypeError(f"unknown outcome type: {type(outcome).__name__}")
        return True

    def clear(self) -> None:
        """Clear path, output and error. Ignored while a run is active."""
        if self.is_running:
            return
        self.path_text = ""
        self.error = None
        self.progress = None
        self._clear_output()

    def _clear_output(self) -> None:
        self.hex_digest = ""
        self.base64_digest = ""
        self.elapsed_s = None
        self.bytes_processed = None
        self.result_path = None
