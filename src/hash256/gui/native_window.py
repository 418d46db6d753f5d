"""Native (pywebview) window setup and config persistence on shutdown."""

from __future__ import annotations

from typing import Optional, Tuple

from nicegui import app

from hash256.core.utils.logging import get_logger
from hash256.gui.app_config import AppConfig
from hash256.gui.config import MIN_WINDOW_SIZE

logger = get_logger(__name__)

Rect = Tuple[int, int, int, int]


def sanitize_window_rect(rect: Optional[Rect]) -> Optional[Rect]:
    """Return the rect if usable for initial placement, else None.

    Rejects rects smaller than MIN_WINDOW_SIZE and off-screen positions
    (e.g. a disconnected secondary display); the OS then places the window.
    """
    if rect is None:
        return None
    x, y, w, h = map(int, rect)
    min_w, min_h = MIN_WINDOW_SIZE
    if w < min_w or h < min_h:
        logger.warning(f"window rect too small; ignoring: {(x, y, w, h)}")
        return None
    if x < 0 or y < 0:
        logger.warning(f"window rect has off-screen position (x={x}, y={y}); omitting rect")
        return None
    return (x, y, w, h)


def configure_native_window_args(app_config: AppConfig) -> None:
    """Set pywebview window args (x, y, width, height, min_size) before ui.run()."""
    native = getattr(app, "native", None)
    if native is None:
        return

    native.window_args["min_size"] = MIN_WINDOW_SIZE

    rect = sanitize_window_rect(app_config.get_window_rect())
    if rect is None:
        return
    x, y, w, h = rect
    logger.info(f"setting initial pywebview window: x={x} y={y} w={w} h={h}")
    native.window_args.update({"x": x, "y": y, "width": w, "height": h})


async def read_window_rect() -> Optional[Rect]:
    """Current native window rect (x, y, w, h), or None in web mode."""
    native = getattr(app, "native", None)
    win = getattr(native, "main_window", None) if native is not None else None
    if win is None:
        return None

    size = await win.get_size()
    pos = await win.get_position()
    if not isinstance(size, (list, tuple)) or len(size) < 2:
        logger.debug(f"[rect] get_size unexpected: {size!r}")
        return None
    if not isinstance(pos, (list, tuple)) or len(pos) < 2:
        logger.debug(f"[rect] get_position unexpected: {pos!r}")
        return None
    try:
        return (int(pos[0]), int(pos[1]), int(size[0]), int(size[1]))
    except (TypeError, ValueError):
        logger.debug(f"[rect] failed to coerce pos/size to int: pos={pos!r} size={size!r}")
        return None


def install_native_rect_polling(app_config: AppConfig, *, poll_sec: float = 1.0) -> None:
    """Keep app_config.window_rect in sync with the native window.

    Must be called from inside a page function (uses ui.timer). No-op in web mode.
    """
    from nicegui import ui

    if getattr(getattr(app, "native", None), "main_window", None) is None:
        return

    async def _poll_once() -> None:
        rect = await read_window_rect()
        if rect is not None and tuple(app_config.get_window_rect()) != rect:
            app_config.set_window_rect(*rect)

    ui.timer(poll_sec, _poll_once)


def install_shutdown_handlers(app_config: AppConfig) -> None:
    """Persist app_config when the app shuts down."""

    async def _persist_on_shutdown() -> None:
        try:
            app_config.save()
        except OSError:
            logger.exception("Failed to save app_config")

    app.on_shutdown(_persist_on_shutdown)
