"""Process-level application context.

Holds what is shared by every browser tab/window: the loaded AppConfig and
the runtime environment. Per-tab state (AppState, EventBus, HashController)
is created by the page function so that runs in one tab never reconcile
into another.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from hash256.core.utils.logging import get_logger
from hash256.gui.app_config import AppConfig

logger = get_logger(__name__)


def env_bool(name: str, default: bool) -> bool:
    """Parse env var as bool; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def env_int(name: str, default: int) -> int:
    """Parse env var as int; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class RuntimeEnvironment:
    """Runtime environment detection for UI feature gating.

    Attributes:
        native_mode: True if running in native mode (pywebview), from HASH256_GUI_NATIVE.
        reload: True to run uvicorn with auto reload, from HASH256_GUI_RELOAD.
    """

    native_mode: bool
    reload: bool

    @classmethod
    def detect(cls) -> "RuntimeEnvironment":
        return cls(
            native_mode=env_bool("HASH256_GUI_NATIVE", True),
            reload=env_bool("HASH256_GUI_RELOAD", False),
        )


class AppContext:
    """Singleton with the shared AppConfig."""

    _instance: Optional["AppContext"] = None

    def __new__(cls, *args, **kwargs) -> "AppContext":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, app_config: AppConfig | None = None) -> None:
        if self._initialized:
            return
        if app_config is None:
            app_config = AppConfig.load(create_if_missing=True)
        self.app_config: AppConfig = app_config
        self.runtime_env: RuntimeEnvironment = RuntimeEnvironment.detect()
        self._initialized = True
        logger.info(f"AppContext initialized: config={self.app_config.path} env={self.runtime_env}")

    @classmethod
    def reset(cls) -> None:
        """Forget the singleton (tests)."""
        cls._instance = None
