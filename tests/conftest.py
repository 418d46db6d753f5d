"""Pytest configuration and fixtures for hash256 tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def make_file(tmp_path: Path):
    """Factory fixture: write bytes to a file under tmp_path and return its path."""

    def _make(name: str, data: bytes) -> Path:
        p = tmp_path / name
        p.write_bytes(data)
        return p

    return _make


@pytest.fixture
def big_payload() -> bytes:
    """A few MiB of non-repeating-ish bytes, larger than one block."""
    chunk = bytes(range(256)) * 4096  # 1 MiB
    return chunk * 3 + b"tail-bytes"
