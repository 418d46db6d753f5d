"""File selection helpers: native open dialog (pywebview) and drop payloads."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

from nicegui import app

from hash256.core.utils.logging import get_logger

logger = get_logger(__name__)


def initial_directory(path_text: str, last_path: Optional[Path] = None) -> Path:
    """Directory the file dialog should open in.

    Prefers the current path text (itself if a directory, else its parent),
    then the last hashed file's folder, then the home folder.
    """
    for candidate in (path_text.strip(), str(last_path) if last_path else ""):
        if not candidate:
            continue
        p = Path(candidate).expanduser()
        if p.is_dir():
            return p
        if p.parent.is_dir():
            return p.parent
    return Path.home()


def path_from_drop_payload(payload: Any) -> Optional[str]:
    """Local file path from the data of a browser drop event.

    File managers put a text/uri-list (RFC 2483) or plain text on the drag.
    The first non-comment entry wins. Non-file URLs give None.
    """
    if isinstance(payload, (list, tuple)):
        payload = payload[0] if payload else ""
    if not isinstance(payload, str):
        return None

    for line in payload.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("file:"):
            parsed = urlparse(line)
            if parsed.netloc and parsed.netloc != "localhost":
                return None
            return url2pathname(parsed.path)
        if "://" in line:
            logger.debug(f"ignoring non-file drop: {line!r}")
            return None
        return line
    return None


def is_native_mode_available() -> bool:
    """True if a pywebview main window exists (NiceGUI native mode)."""
    native = getattr(app, "native", None)
    return native is not None and getattr(native, "main_window", None) is not None


async def prompt_for_file(initial: Path) -> Optional[str]:
    """Open the native open-file dialog.

    Imports webview inside the function to avoid pickling issues with
    multiprocessing.

    Returns:
        Selected file path as string, or None if cancelled, unavailable or failed.
    """
    native = getattr(app, "native", None)
    if not native:
        logger.warning("app.native is not available - not in native mode?")
        return None

    main_window = getattr(native, "main_window", None)
    if not main_window:
        logger.warning("app.native.main_window is not available")
        return None

    try:
        import webview  # type: ignore

        try:
            open_dialog = webview.FileDialog.OPEN  # type: ignore[attr-defined]
        except AttributeError:
            # pywebview < 6.1
            open_dialog = webview.OPEN_DIALOG  # type: ignore[attr-defined]

        logger.debug(f"Opening file dialog with initial directory: {initial}")
        selection = await main_window.create_file_dialog(  # type: ignore[attr-defined]
            open_dialog,
            directory=str(initial),
            allow_multiple=False,
        )
    except Exception as exc:
        logger.warning(f"pywebview file dialog failed: {exc}", exc_info=True)
        return None

    if not selection:
        logger.debug("User cancelled file dialog or no selection returned")
        return None

    # pywebview returns a tuple on macOS, a list elsewhere
    if isinstance(selection, (list, tuple)):
        first = selection[0]
        if not isinstance(first, str):
            logger.debug(f"file dialog returned non-str entry: {first!r}")
            return None
        return first

    return str(selection)
