"""Tagged outcomes of a hashing run.

A run ends in exactly one of `HashResult`, `HashFailure` or `HashCancelled`.
All three are immutable and carry no run token; the token travels alongside
them in the worker messages (see `hash256.gui.thread_job_runner`).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Union

FailureKind = Literal["open", "read", "internal"]


@dataclass(frozen=True)
class HashResult:
    """Successful run.

    Attributes:
        hex: Lower-case hexadecimal digest (64 characters).
        base64: Padded standard Base64 digest (44 characters).
        elapsed_s: Wall-clock seconds spent opening, reading and hashing.
        bytes_processed: File size from metadata, or the counted total.
        path: Path that was hashed.
    """

    hex: str
    base64: str
    elapsed_s: float
    bytes_processed: int
    path: Optional[Path] = None


@dataclass(frozen=True)
class HashFailure:
    """Failed run with a message suitable for display."""

    message: str
    kind: FailureKind = "internal"


@dataclass(frozen=True)
class HashCancelled:
    """Run stopped because its cancel flag was set."""


HashOutcome = Union[HashResult, HashFailure, HashCancelled]
