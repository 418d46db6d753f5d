"""Core progress and cancellation primitives (UI-agnostic)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ProgressMessage:
    """Snapshot of a run's progress as seen by the UI.

    Args:
        phase: Logical phase name; runs only report "hash".
        done: Bytes processed so far.
        total: Total bytes; None when the size is unknown.
        path: Optional path associated with the update.
    """

    phase: str
    done: int = 0
    total: Optional[int] = None
    path: Optional[Path] = None

    @property
    def fraction(self) -> Optional[float]:
        """Completed fraction in [0, 1], or None when the total is unknown."""
        if self.total is None or self.total <= 0:
            return None
        return max(0.0, min(1.0, self.done / self.total))


class CancelledError(Exception):
    """Raised when a core operation is cancelled."""


class ProgressCounter:
    """Byte counter shared between one writer thread and any number of readers.

    The worker thread calls `publish()` after every block, the UI thread reads
    `processed` on its poll tick. Storing an int attribute is atomic under the
    GIL, so no lock is taken. Values only move forward.
    """

    def __init__(self, total: Optional[int] = None, path: Optional[Path] = None) -> None:
        self.total: Optional[int] = total
        self.path: Optional[Path] = path
        self._processed: int = 0

    @property
    def processed(self) -> int:
        return self._processed

    def publish(self, processed: int) -> None:
        """Store a new cumulative byte count (ignored if lower than the current one)."""
        if processed > self._processed:
            self._processed = processed

    def snapshot(self, phase: str = "hash") -> ProgressMessage:
        return ProgressMessage(
            phase=phase,
            done=self._processed,
            total=self.total,
            path=self.path,
        )

    def __repr__(self) -> str:
        return f"ProgressCounter(processed={self._processed}, total={self.total})"
