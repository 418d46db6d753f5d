"""About section: version information and the tail of the log file."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Optional

from nicegui import ui

from hash256.core.utils.about import getVersionInfo
from hash256.core.utils.logging import get_log_file_path, get_logger

logger = get_logger(__name__)


def getVersionInfo_gui() -> dict:
    """Version info with the NiceGUI version added."""
    import nicegui

    version_info = getVersionInfo()
    version_info["NiceGUI version"] = nicegui.__version__
    return version_info


def read_log_tail(log_path: Optional[Path], max_lines: int) -> str:
    """Last max_lines of the log file, "[empty]" if there is none."""
    if log_path is None or not log_path.exists():
        return "[empty]"
    try:
        with log_path.open("r", encoding="utf-8", errors="replace") as f:
            tail_lines = deque(f, maxlen=max_lines)
    except OSError as e:
        return f"Unable to read log file: {e}"
    content = "".join(tail_lines)
    if len(tail_lines) == max_lines:
        content = f"...(truncated, last {max_lines} lines)...\n{content}"
    return content or "[empty]"


class AboutView:
    """Collapsed About section under the hashing UI."""

    def __init__(self, *, max_log_lines: int = 200) -> None:
        self._max_log_lines = max_log_lines

    def _copy_version_info(self, version_info: dict) -> None:
        ui.clipboard.write("\n".join(f"{key}: {value}" for key, value in version_info.items()))
        ui.notify("Copied", type="positive")

    def render(self) -> None:
        version_info = getVersionInfo_gui()

        with ui.expansion("About", value=False).classes("w-full"):
            with ui.row().classes("items-center gap-2"):
                ui.label("Version info").classes("text-lg font-semibold")
                ui.button("Copy", on_click=lambda: self._copy_version_info(version_info)).props("flat")
            for key, value in version_info.items():
                with ui.row().classes("items-center gap-2"):
                    ui.label(f"{key}:").classes("text-gray-500")
                    ui.label(str(value))

            with ui.expansion("Logs", value=False).classes("w-full"):
                ui.code(read_log_tail(get_log_file_path(), self._max_log_lines)).classes("w-full text-sm").style(
                    "white-space: pre-wrap; font-family: monospace; max-height: 400px; overflow: auto;"
                )
