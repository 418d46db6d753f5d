"""Hash page view: path field, toggles, digests and progress.

The view only emits intent events and re-reads AppState when the controller
announces a change. It never starts threads or touches run handles.
"""

from __future__ import annotations

from typing import Optional

from nicegui import ui

from hash256.core.utils.logging import get_logger
from hash256.gui.bus import EventBus
from hash256.gui.client_utils import safe_call
from hash256.gui.events import (
    CancelHash,
    ClearHash,
    HashProgress,
    HashStateChanged,
    PathOrigin,
    SelectPathEvent,
    SetAutoHash,
    SetUppercase,
    StartHash,
)
from hash256.gui.file_picker import (
    initial_directory,
    is_native_mode_available,
    path_from_drop_payload,
    prompt_for_file,
)
from hash256.gui.state import AppState

logger = get_logger(__name__)

_DROP_JS = '(e) => emit(e.dataTransfer.getData("text/uri-list") || e.dataTransfer.getData("text/plain") || "")'


class HashView:
    """Single-page hashing UI."""

    def __init__(self, bus: EventBus, app_state: AppState) -> None:
        self._bus = bus
        self._app_state = app_state

        self._path_input: Optional[ui.input] = None
        self._browse_button: Optional[ui.button] = None
        self._hash_button: Optional[ui.button] = None
        self._clear_button: Optional[ui.button] = None
        self._cancel_button: Optional[ui.button] = None
        self._progress_bar: Optional[ui.linear_progress] = None
        self._hex_label: Optional[ui.label] = None
        self._base64_label: Optional[ui.label] = None
        self._copy_hex_button: Optional[ui.button] = None
        self._copy_base64_button: Optional[ui.button] = None
        self._path_label: Optional[ui.label] = None
        self._meta_label: Optional[ui.label] = None
        self._uppercase_checkbox: Optional[ui.checkbox] = None
        self._auto_hash_checkbox: Optional[ui.checkbox] = None

        # set while the view writes the path field itself
        self._suppress_path_emit: bool = False

        bus.subscribe_state(HashStateChanged, self._on_state_changed)
        bus.subscribe_state(HashProgress, self._on_progress)
        bus.subscribe_state(SelectPathEvent, self._on_path_state)

    def render(self) -> None:
        s = self._app_state
        page = ui.column().classes("w-full max-w-4xl gap-4 p-4")
        page.on("dragover.prevent", js_handler="() => {}")
        page.on("drop.prevent", self._on_drop, js_handler=_DROP_JS)
        with page:
            ui.label("Hash256").classes("text-2xl font-semibold")

            with ui.row().classes("w-full items-center gap-2 no-wrap"):
                self._path_input = ui.input(
                    placeholder="Paste a file path...",
                    value=s.path_text,
                    on_change=lambda e: self._on_path_typed(e.value),
                ).classes("flex-1")
                self._path_input.on("keydown.enter", lambda _: self._bus.emit(StartHash()))
                self._browse_button = ui.button("Browse", on_click=self._on_browse_click)
                self._hash_button = ui.button("Hash", on_click=lambda: self._bus.emit(StartHash()))
                self._clear_button = ui.button("Clear", on_click=lambda: self._bus.emit(ClearHash()))
                self._cancel_button = ui.button(
                    "Cancel", on_click=lambda: self._bus.emit(CancelHash())
                ).props("color=primary")

            with ui.row().classes("items-center gap-6"):
                self._uppercase_checkbox = ui.checkbox(
                    "Uppercase HEX",
                    value=s.uppercase,
                    on_change=lambda e: self._bus.emit(SetUppercase(value=bool(e.value))),
                )
                self._auto_hash_checkbox = ui.checkbox(
                    "Auto hash on select",
                    value=s.auto_hash,
                    on_change=lambda e: self._bus.emit(SetAutoHash(value=bool(e.value))),
                )

            self._progress_bar = ui.linear_progress(value=0.0, show_value=False).classes("w-full")

            self._hex_label, self._copy_hex_button = self._output_row(
                "SHA-256 (HEX)", lambda: self._app_state.displayed_hex
            )
            self._base64_label, self._copy_base64_button = self._output_row(
                "SHA-256 (Base64)", lambda: self._app_state.base64_digest
            )

            self._path_label = ui.label("").classes("text-sm")
            self._meta_label = ui.label("").classes("text-sm")

        self._refresh()

    def _output_row(self, title: str, value_fn) -> tuple[ui.label, ui.button]:
        with ui.row().classes("w-full items-center gap-2 no-wrap"):
            ui.label(title).classes("w-48")
            value_label = ui.label("-").classes("flex-1 font-mono break-all")
            copy_button = ui.button(
                "Copy", on_click=lambda: self._copy(value_fn())
            ).props("outline")
        return value_label, copy_button

    # ------------------------------------------------------------------
    # user input
    # ------------------------------------------------------------------
    def _on_path_typed(self, value: Optional[str]) -> None:
        if self._suppress_path_emit:
            return
        self._bus.emit(SelectPathEvent(path=value or "", origin=PathOrigin.TEXT))

    async def _on_browse_click(self) -> None:
        if not is_native_mode_available():
            ui.notify("File dialog requires native mode; paste a path instead", type="warning")
            return
        start_dir = initial_directory(self._app_state.path_text, self._app_state.result_path)
        selected = await prompt_for_file(start_dir)
        if selected:
            self._bus.emit(SelectPathEvent(path=selected, origin=PathOrigin.BROWSE))

    def _on_drop(self, e) -> None:
        path = path_from_drop_payload(e.args)
        if not path:
            ui.notify("Dropped item has no file path; use Browse or paste the path", type="warning")
            return
        self._bus.emit(SelectPathEvent(path=path, origin=PathOrigin.DROP))

    def _copy(self, text: str) -> None:
        if not text:
            return
        ui.clipboard.write(text)
        ui.notify("Copied", type="positive")

    # ------------------------------------------------------------------
    # state -> UI
    # ------------------------------------------------------------------
    def _on_state_changed(self, e: HashStateChanged) -> None:
        safe_call(self._refresh)

    def _on_progress(self, e: HashProgress) -> None:
        safe_call(self._refresh_progress)

    def _on_path_state(self, e: SelectPathEvent) -> None:
        safe_call(self._sync_path_input)

    def _sync_path_input(self) -> None:
        if self._path_input is None or self._path_input.value == self._app_state.path_text:
            return
        self._suppress_path_emit = True
        try:
            self._path_input.value = self._app_state.path_text
        finally:
            self._suppress_path_emit = False

    def _refresh_progress(self) -> None:
        if self._progress_bar is None:
            return
        s = self._app_state
        fraction = s.progress.fraction if (s.is_running and s.progress is not None) else None
        self._progress_bar.visible = s.is_running
        self._progress_bar.value = fraction if fraction is not None else 0.0

    def _refresh(self) -> None:
        if self._hex_label is None:
            return
        s = self._app_state
        busy = s.is_running

        self._sync_path_input()
        # toggles can also change from the Options section
        if self._uppercase_checkbox.value != s.uppercase:
            self._uppercase_checkbox.value = s.uppercase
        if self._auto_hash_checkbox.value != s.auto_hash:
            self._auto_hash_checkbox.value = s.auto_hash
        self._hex_label.text = s.displayed_hex or "-"
        self._base64_label.text = s.base64_digest or "-"
        self._path_label.text = str(s.result_path) if s.result_path and not s.error else ""
        self._meta_label.text = s.meta_text()
        self._meta_label.classes(replace="text-sm text-red-400" if s.error else "text-sm")

        for button in (self._browse_button, self._clear_button, self._hash_button):
            button.set_enabled(not busy)
        self._cancel_button.visible = busy
        self._cancel_button.set_enabled(busy and not s.is_cancelling)
        self._copy_hex_button.set_enabled(s.has_result and not busy)
        self._copy_base64_button.set_enabled(s.has_result and not busy)

        self._refresh_progress()
