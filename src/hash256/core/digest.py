"""Incremental SHA-256 digest engine and encoders.

The engine is a thin wrapper over `hashlib.sha256` that enforces the
new -> update* -> finalize lifecycle: once finalized it refuses further
input until `reset()` is called.
"""

from __future__ import annotations

import base64
import hashlib

DIGEST_SIZE = 32


class DigestFinalizedError(RuntimeError):
    """Raised when a finalized DigestEngine is updated or finalized again."""


class DigestEngine:
    """Running SHA-256 state.

    Memory use is constant regardless of how many bytes are absorbed, and the
    final digest does not depend on how the input was split into blocks.
    """

    name = "sha256"
    digest_size = DIGEST_SIZE

    def __init__(self) -> None:
        self._hasher = hashlib.sha256()
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def update(self, data: bytes) -> "DigestEngine":
        """Absorb a block of bytes. Returns self so calls can be chained."""
        if self._finalized:
            raise DigestFinalizedError("DigestEngine.update() called after finalize()")
        self._hasher.update(data)
        return self

    def finalize(self) -> bytes:
        """Return the 32-byte digest. The engine must be reset before reuse."""
        if self._finalized:
            raise DigestFinalizedError("DigestEngine.finalize() called twice")
        self._finalized = True
        return self._hasher.digest()

    def reset(self) -> None:
        self._hasher = hashlib.sha256()
        self._finalized = False


def to_hex(digest: bytes, *, uppercase: bool = False) -> str:
    """Hex-encode a digest, lower case unless `uppercase`."""
    text = digest.hex()
    return text.upper() if uppercase else text


def to_base64(digest: bytes) -> str:
    """Base64-encode a digest (RFC 4648 standard alphabet, padded)."""
    return base64.b64encode(digest).decode("ascii")


def sha256_bytes(data: bytes) -> bytes:
    """One-shot digest of an in-memory buffer."""
    return DigestEngine().update(data).finalize()
