"""Chunked file reader that streams a file through the digest engine.

`hash_file` is meant to run on a worker thread. It publishes the cumulative
byte count to a `ProgressCounter` after every block and checks a
`threading.Event` between blocks so the UI can cancel a long run. The file
handle is owned by this function and closed on every exit path.
"""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from typing import Optional, Union

from hash256.core.digest import DigestEngine, to_base64, to_hex
from hash256.core.outcome import HashResult
from hash256.core.progress import CancelledError, ProgressCounter
from hash256.core.utils.logging import get_logger

logger = get_logger(__name__)

BLOCK_SIZE = 1024 * 1024  # 1 MiB


class HashError(Exception):
    """Base class for errors raised while hashing a file."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class OpenError(HashError):
    """The path does not exist, is a directory, or cannot be opened."""


class ReadError(HashError):
    """An I/O error happened while reading the file."""


def _describe(exc: Exception) -> str:
    return getattr(exc, "strerror", None) or str(exc)


def hash_file(
    path: Union[str, os.PathLike],
    *,
    progress: Optional[ProgressCounter] = None,
    cancel_event: Optional[threading.Event] = None,
    block_size: int = BLOCK_SIZE,
) -> HashResult:
    """Compute the SHA-256 digest of a file in fixed-size blocks.

    Args:
        path: File to hash.
        progress: Counter that receives the cumulative byte count after each
            block. Its `total` is set from the file metadata when available.
        cancel_event: Checked before the first read and after each block. When
            set, the run stops without finalizing the digest.
        block_size: Bytes per read. Internal tuning knob, must be positive.

    Returns:
        HashResult with hex/Base64 digests, elapsed seconds and byte count.

    Raises:
        OpenError: Path missing, a directory, or not readable.
        ReadError: I/O error while reading.
        CancelledError: `cancel_event` was set.
    """
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")

    path = Path(path)
    started = time.perf_counter()

    if path.is_dir():
        raise OpenError(f"Failed to open file: {path} (is a directory)", path=path)

    try:
        f = open(path, "rb")
    except (OSError, ValueError) as exc:
        raise OpenError(f"Failed to open file: {path} ({_describe(exc)})", path=path) from exc

    with f:
        try:
            total: Optional[int] = os.fstat(f.fileno()).st_size
        except OSError:
            total = None
        if progress is not None:
            progress.total = total
        logger.debug(f"hashing {path} total={total} block_size={block_size}")

        if cancel_event is not None and cancel_event.is_set():
            raise CancelledError(f"cancelled before reading {path}")

        engine = DigestEngine()
        processed = 0
        while True:
            try:
                chunk = f.read(block_size)
            except OSError as exc:
                raise ReadError(f"Failed to read file: {path} ({_describe(exc)})", path=path) from exc
            if not chunk:
                break
            engine.update(chunk)
            processed += len(chunk)
            if progress is not None:
                progress.publish(processed)
            if cancel_event is not None and cancel_event.is_set():
                logger.debug(f"cancelled {path} after {processed} bytes")
                raise CancelledError(f"cancelled after {processed} bytes of {path}")

    digest = engine.finalize()
    elapsed_s = time.perf_counter() - started
    result = HashResult(
        hex=to_hex(digest),
        base64=to_base64(digest),
        elapsed_s=elapsed_s,
        bytes_processed=total if total is not None else processed,
        path=path,
    )
    logger.debug(f"hashed {path}: {processed} bytes in {elapsed_s:.3f}s")
    return result
