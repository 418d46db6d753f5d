"""Human-readable formatting for sizes, durations and throughput."""

from __future__ import annotations

from typing import Optional

_UNITS = ("B", "KB", "MB", "GB", "TB")


def human_bytes(num_bytes: float) -> str:
    """Format a byte count with 1024 steps, e.g. "512 B", "1.50 MB"."""
    value = float(num_bytes)
    idx = 0
    while value >= 1024.0 and idx < len(_UNITS) - 1:
        value /= 1024.0
        idx += 1
    if idx == 0:
        return f"{value:.0f} {_UNITS[idx]}"
    return f"{value:.2f} {_UNITS[idx]}"


def human_duration(seconds: float) -> str:
    """Format seconds as "N ms" below one second, else "x.xx s"."""
    ms = int(seconds * 1000)
    if ms < 1000:
        return f"{ms} ms"
    return f"{ms / 1000.0:.2f} s"


def throughput(num_bytes: int, seconds: float) -> float:
    """Bytes per second, 0.0 for a zero duration."""
    if seconds <= 0:
        return 0.0
    return num_bytes / seconds


def format_meta_line(num_bytes: int, seconds: float) -> str:
    """Meta line shown under the digests: duration, size and speed."""
    speed = throughput(num_bytes, seconds)
    return f"{human_duration(seconds)} • {human_bytes(num_bytes)} • {human_bytes(speed)}/s"


def format_percent(done: int, total: Optional[int]) -> Optional[str]:
    """Integer percentage string like "42%", or None when total is unknown."""
    if total is None or total <= 0:
        return None
    pct = max(0.0, min(100.0, done / total * 100.0))
    return f"{pct:.0f}%"
