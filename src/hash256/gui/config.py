from __future__ import annotations

APP_NAME = "Hash256"
STORAGE_SECRET = "hash256-session-secret"  # Secret key for browser session storage

# Developer-level runtime configuration
MIN_WINDOW_SIZE = (900, 420)  # w, h
DEFAULT_POLL_INTERVAL_S: float = 0.1  # UI poll tick for worker progress/outcomes
