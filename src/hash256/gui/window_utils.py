"""Window utility functions for native mode operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from nicegui import app

from hash256.core.utils.about import get_app_version
from hash256.core.utils.logging import get_logger
from hash256.gui.config import APP_NAME

if TYPE_CHECKING:
    from hash256.gui.state import AppState

logger = get_logger(__name__)


def window_title_for_state(app_state: "AppState") -> str:
    """Title with live percentage while hashing.

    Examples:
        "Hash256 v1.0.0"            idle
        "Hash256 v1.0.0 - 42%"      hashing, size known
        "Hash256 v1.0.0 - hashing..." hashing, size unknown
    """
    base = f"{APP_NAME} v{get_app_version()}"
    if not app_state.is_running:
        return base
    pct = app_state.progress_percent()
    if pct is not None:
        return f"{base} - {pct}"
    return f"{base} - hashing..."


def set_window_title(title: str) -> None:
    """Set the native window title. Does nothing in web mode."""
    native = getattr(app, "native", None)
    if native is None:
        return
    main_window = getattr(native, "main_window", None)
    if main_window is not None:
        main_window.set_title(title)


def set_window_title_for_state(app_state: "AppState") -> None:
    set_window_title(window_title_for_state(app_state))
