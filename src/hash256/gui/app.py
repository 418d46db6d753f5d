"""Hash256 GUI application entry point.

Run with:
    uv run python -m hash256.gui.app
or the `hash256` console script.
"""

from __future__ import annotations

import os
import multiprocessing as mp
from multiprocessing import freeze_support

from nicegui import ui

from hash256.core.utils.about import get_app_version
from hash256.core.utils.logging import get_logger, setup_logging
from hash256.gui.app_context import AppContext, env_int
from hash256.gui.bus import clear_client_bus, get_client_id, get_event_bus
from hash256.gui.config import APP_NAME, STORAGE_SECRET
from hash256.gui.controllers import HashController
from hash256.gui.native_window import (
    configure_native_window_args,
    install_native_rect_polling,
    install_shutdown_handlers,
)
from hash256.gui.state import AppState
from hash256.gui.views import AboutView, HashView, OptionsView

logger = get_logger(__name__)


def build_page(context: AppContext) -> HashController:
    """Create per-client state, controller and views, and render the views."""
    cfg = context.app_config
    app_state = AppState(uppercase=cfg.get_uppercase(), auto_hash=cfg.get_auto_hash())
    bus = get_event_bus()
    controller = HashController(app_state, bus, cfg)
    HashView(bus, app_state).render()
    OptionsView(cfg, bus).render()
    AboutView().render()
    return controller


@ui.page("/")
def home() -> None:
    ui.page_title(f"{APP_NAME} v{get_app_version()}")
    ui.dark_mode(True)
    context = AppContext()
    install_native_rect_polling(context.app_config)
    controller = build_page(context)

    client_id = get_client_id()

    def _on_disconnect() -> None:
        logger.info(f"client {client_id} disconnected, abandoning active run")
        controller.shutdown()
        clear_client_bus(client_id)

    ui.context.client.on_disconnect(_on_disconnect)


def main(*, reload: bool | None = None, native_bool: bool | None = None) -> None:
    """Start the Hash256 GUI application.

    Env vars (used only when arg is None):
      - HASH256_GUI_NATIVE: 1/0 (default 1)
      - HASH256_GUI_RELOAD: 1/0 (default 0)
      - HOST: bind host
      - PORT: bind port
    """
    setup_logging(level=os.getenv("HASH256_LOG_LEVEL", "INFO"))
    context = AppContext()
    env = context.runtime_env
    native_bool = env.native_mode if native_bool is None else native_bool
    reload = env.reload if reload is None else reload

    from nicegui import native as native_module

    port = env_int("PORT", native_module.find_open_port())
    default_host = "127.0.0.1" if native_bool else "0.0.0.0"
    host = os.getenv("HOST", default_host)

    logger.info(f"Starting {APP_NAME} GUI: port={port} reload={reload} native={native_bool}")

    if native_bool:
        configure_native_window_args(context.app_config)
    install_shutdown_handlers(context.app_config)

    ui.run(
        host=host,
        port=port,
        reload=reload,
        native=native_bool,
        storage_secret=STORAGE_SECRET,
        title=APP_NAME,
    )


if __name__ in {"__main__", "__mp_main__"}:
    freeze_support()
    # worker processes spawned by pywebview re-import this module; only the main process runs the GUI
    if mp.current_process().name == "MainProcess":
        main()
