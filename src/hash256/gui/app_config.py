# src/hash256/gui/app_config.py
"""
App-wide config persistence for hash256 (platformdirs + JSON).

Persisted items (schema v1):
- uppercase: bool                   (display hex digest in upper case)
- auto_hash: bool                   (start hashing as soon as a path is selected)
- poll_interval_ms: int             (UI poll tick for progress and results)
- window_rect: List[int]            (native window geometry: [x, y, w, h])

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults (safe for distributed desktop apps)
  - optional: keep loaded but update version
- Optional "create_if_missing" flag to write defaults on first run

Design:
- AppConfigData dataclass holds JSON-friendly data (dot access)
- AppConfig manager provides explicit API for load/save and common operations
- Field metadata drives the Options widgets (see views/options_view.py)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir

from hash256.core.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

# Defaults
DEFAULT_UPPERCASE: bool = False
DEFAULT_AUTO_HASH: bool = True
DEFAULT_POLL_INTERVAL_MS: int = 100
MIN_POLL_INTERVAL_MS: int = 20
MAX_POLL_INTERVAL_MS: int = 1000
DEFAULT_WINDOW_RECT: List[int] = [100, 100, 900, 560]  # x, y, w, h


def _coerce_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(raw, (int, float)):
        return bool(raw)
    return default


@dataclass
class AppConfigData:
    """
    JSON-serializable config payload.

    Keep fields JSON-friendly:
    - primitives, lists, dicts
    - Field metadata is used to drive GUI widget generation
    """
    schema_version: int = SCHEMA_VERSION

    uppercase: bool = field(
        default=DEFAULT_UPPERCASE,
        metadata={
            "widget_type": "checkbox",
            "label": "Uppercase HEX",
            "requires_restart": False,
        },
    )

    auto_hash: bool = field(
        default=DEFAULT_AUTO_HASH,
        metadata={
            "widget_type": "checkbox",
            "label": "Auto hash on select",
            "requires_restart": False,
        },
    )

    poll_interval_ms: int = field(
        default=DEFAULT_POLL_INTERVAL_MS,
        metadata={
            "widget_type": "number",
            "label": "Progress poll interval (ms)",
            "min": MIN_POLL_INTERVAL_MS,
            "max": MAX_POLL_INTERVAL_MS,
            "requires_restart": False,
        },
    )

    window_rect: List[int] = field(
        default_factory=lambda: list(DEFAULT_WINDOW_RECT),
        metadata={
            "widget_type": "display",
            "label": "Window Rect",
            "requires_restart": False,
        },
    )

    def to_json_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict, excluding metadata."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "AppConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates partially missing values
        """
        schema_version = int(d.get("schema_version", -1))

        uppercase = _coerce_bool(d.get("uppercase", DEFAULT_UPPERCASE), DEFAULT_UPPERCASE)
        auto_hash = _coerce_bool(d.get("auto_hash", DEFAULT_AUTO_HASH), DEFAULT_AUTO_HASH)

        poll_raw = d.get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)
        poll_interval_ms = DEFAULT_POLL_INTERVAL_MS
        try:
            poll_interval_ms = int(poll_raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid poll_interval_ms '{poll_raw}', using default {DEFAULT_POLL_INTERVAL_MS}")

        rect = d.get("window_rect", list(DEFAULT_WINDOW_RECT))
        window_rect: List[int] = list(DEFAULT_WINDOW_RECT)
        if isinstance(rect, list) and len(rect) == 4:
            try:
                window_rect = [int(rect[0]), int(rect[1]), int(rect[2]), int(rect[3])]
            except (TypeError, ValueError):
                window_rect = list(DEFAULT_WINDOW_RECT)

        return cls(
            schema_version=schema_version,
            uppercase=uppercase,
            auto_hash=auto_hash,
            poll_interval_ms=poll_interval_ms,
            window_rect=window_rect,
        )


class AppConfig:
    """
    Manager for loading/saving AppConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[AppConfigData] = None):
        self.path = path
        self.data = data if data is not None else AppConfigData()

    # -----------------------------
    # Construction / persistence
    # -----------------------------
    @staticmethod
    def default_config_path(
        app_name: str = "hash256",
        filename: str = "app_config.json",
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/hash256/app_config.json
        Linux:   ~/.config/hash256/app_config.json
        Windows: %APPDATA%\\hash256\\app_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "hash256",
        filename: str = "app_config.json",
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "AppConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = AppConfigData(schema_version=schema_version)

        try:
            raw = path.read_text(encoding="utf-8")
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                logger.warning(f"App config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = AppConfigData.from_json_dict(parsed)

            if int(loaded.schema_version) != int(schema_version):
                if reset_on_version_mismatch:
                    logger.warning(
                        f"App config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={schema_version}, resetting to defaults"
                    )
                    return cls(path=path, data=default_data)
                loaded.schema_version = int(schema_version)

            cls._normalize_loaded_data(loaded)
            return cls(path=path, data=loaded)

        except FileNotFoundError:
            logger.info(f"App config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except Exception as e:
            logger.error(f"Failed to load app config from {path}: {e}", exc_info=True)
            logger.info("Using default app config")
            return cls(path=path, data=default_data)

    @staticmethod
    def _normalize_loaded_data(data: AppConfigData) -> None:
        """Clamp/repair values that survived tolerant loading."""
        if not (MIN_POLL_INTERVAL_MS <= data.poll_interval_ms <= MAX_POLL_INTERVAL_MS):
            logger.warning(
                f"poll_interval_ms {data.poll_interval_ms} out of range, using default {DEFAULT_POLL_INTERVAL_MS}"
            )
            data.poll_interval_ms = DEFAULT_POLL_INTERVAL_MS

        if not (isinstance(data.window_rect, list) and len(data.window_rect) == 4):
            data.window_rect = list(DEFAULT_WINDOW_RECT)

    def save(self) -> None:
        """Write config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.data.to_json_dict()
        logger.info(f"saving app_config to disk: {self.path}")
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # -----------------------------
    # Public API: attribute access
    # -----------------------------
    def get_attribute(self, key: str) -> Any:
        """
        Get attribute value by key.

        Raises:
            AttributeError: If key doesn't exist
        """
        if not hasattr(self.data, key):
            raise AttributeError(f"AppConfigData has no attribute '{key}'")
        return getattr(self.data, key)

    def set_attribute(self, key: str, value: Any) -> None:
        """
        Set attribute value by key with validation.

        Args:
            key: Attribute name (e.g., 'uppercase')
            value: New value to set

        Raises:
            AttributeError: If key doesn't exist
            ValueError: If value is invalid for the attribute
        """
        field_info = None
        for f in fields(self.data):
            if f.name == key:
                field_info = f
                break

        if field_info is None:
            raise AttributeError(f"AppConfigData has no attribute '{key}'")

        current_value = getattr(self.data, key)
        if not isinstance(value, type(current_value)):
            try:
                # bool before int: bool is a subclass of int
                if isinstance(current_value, bool):
                    value = _coerce_bool(value, current_value)
                elif isinstance(current_value, str):
                    value = str(value)
                elif isinstance(current_value, int):
                    value = int(value)
                elif isinstance(current_value, float):
                    value = float(value)
                else:
                    raise ValueError(f"Cannot convert {type(value)} to {type(current_value)}")
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value type for '{key}': {e}")

        metadata = field_info.metadata
        widget_type = metadata.get("widget_type")

        if widget_type == "select":
            options = metadata.get("options")
            if options and value not in options:
                raise ValueError(f"Value '{value}' not in allowed options: {options}")

        elif widget_type == "number" or widget_type == "slider":
            min_val = metadata.get("min")
            max_val = metadata.get("max")
            if min_val is not None and value < min_val:
                raise ValueError(f"Value '{value}' is less than minimum '{min_val}'")
            if max_val is not None and value > max_val:
                raise ValueError(f"Value '{value}' is greater than maximum '{max_val}'")

        setattr(self.data, key, value)
        logger.debug(f"Set app_config.{key} = {value}")

    def get_all_fields_with_metadata(self) -> Dict[str, Dict[str, Any]]:
        """
        Get all fields with their metadata (used by GUI to generate widgets).

        Returns:
            Dict mapping field names to their metadata dicts
        """
        result = {}
        for f in fields(self.data):
            if f.name != "schema_version":
                result[f.name] = {
                    "metadata": dict(f.metadata),
                    "value": getattr(self.data, f.name),
                    "type": type(getattr(self.data, f.name)).__name__,
                }
        return result

    # -----------------------------
    # Public API: hashing preferences
    # -----------------------------
    def get_uppercase(self) -> bool:
        return bool(self.data.uppercase)

    def set_uppercase(self, uppercase: bool) -> None:
        self.data.uppercase = bool(uppercase)
        logger.debug(f"Set app_config.uppercase = {uppercase}")

    def get_auto_hash(self) -> bool:
        return bool(self.data.auto_hash)

    def set_auto_hash(self, auto_hash: bool) -> None:
        self.data.auto_hash = bool(auto_hash)
        logger.debug(f"Set app_config.auto_hash = {auto_hash}")

    def get_poll_interval_s(self) -> float:
        return self.data.poll_interval_ms / 1000.0

    # -----------------------------
    # Public API: window geometry
    # -----------------------------
    def set_window_rect(self, x: int, y: int, w: int, h: int) -> None:
        """Set window rectangle [x, y, w, h]."""
        self.data.window_rect = [int(x), int(y), int(w), int(h)]

    def get_window_rect(self) -> Tuple[int, int, int, int]:
        """Return window rectangle as (x, y, w, h)."""
        r = self.data.window_rect
        if not (isinstance(r, list) and len(r) == 4):
            return tuple(DEFAULT_WINDOW_RECT)  # type: ignore[return-value]
        try:
            return (int(r[0]), int(r[1]), int(r[2]), int(r[3]))
        except (TypeError, ValueError):
            return tuple(DEFAULT_WINDOW_RECT)  # type: ignore[return-value]
