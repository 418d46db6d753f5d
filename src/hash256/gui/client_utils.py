"""Guard for UI updates that may outlive their NiceGUI client."""

from __future__ import annotations

from typing import Callable

from hash256.core.utils.logging import get_logger

logger = get_logger(__name__)


def safe_call(func: Callable, *args, **kwargs) -> None:
    """Call a UI update function, ignoring "client deleted" errors.

    Bus handlers can fire after the browser tab that owns the widgets has
    gone away; NiceGUI then raises RuntimeError mentioning "deleted".
    """
    try:
        func(*args, **kwargs)
    except RuntimeError as e:
        if "deleted" not in str(e).lower():
            logger.error(f"safe_call caught RuntimeError in {getattr(func, '__name__', func)}: {e}")
            raise
