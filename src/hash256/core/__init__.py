"""UI-agnostic hashing core: digest engine, chunked reader, progress primitives."""

from hash256.core.digest import DigestEngine, DigestFinalizedError, to_base64, to_hex
from hash256.core.outcome import HashCancelled, HashFailure, HashOutcome, HashResult
from hash256.core.progress import CancelledError, ProgressCounter, ProgressMessage
from hash256.core.reader import BLOCK_SIZE, HashError, OpenError, ReadError, hash_file

__all__ = [
    "BLOCK_SIZE",
    "CancelledError",
    "DigestEngine",
    "DigestFinalizedError",
    "HashCancelled",
    "HashError",
    "HashFailure",
    "HashOutcome",
    "HashResult",
    "OpenError",
    "ProgressCounter",
    "ProgressMessage",
    "ReadError",
    "hash_file",
    "to_base64",
    "to_hex",
]
