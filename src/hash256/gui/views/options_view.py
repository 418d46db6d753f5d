"""Options section view.

Widgets are generated from AppConfig field metadata. Display toggles that
also live in AppState go through the bus so the controller keeps AppState,
the config and the main page checkboxes in sync; every other field is
written to the config directly.
"""

from __future__ import annotations

from typing import Any

from nicegui import ui

from hash256.core.utils.logging import get_logger
from hash256.gui.app_config import AppConfig
from hash256.gui.bus import EventBus
from hash256.gui.client_utils import safe_call
from hash256.gui.events import HashStateChanged, SetAutoHash, SetUppercase

logger = get_logger(__name__)

_INTENT_FIELDS = {
    "uppercase": SetUppercase,
    "auto_hash": SetAutoHash,
}


class OptionsView:
    """Collapsed Options section (app configuration editor)."""

    def __init__(self, app_config: AppConfig, bus: EventBus) -> None:
        """Initialize options view.

        Args:
            app_config: AppConfig instance to read/write settings.
            bus: Client EventBus, used for fields that AppState mirrors.
        """
        self._app_config = app_config
        self._bus = bus
        self._widgets: dict[str, ui.element] = {}

        bus.subscribe_state(HashStateChanged, self._on_state_changed)

    def render(self) -> None:
        """Create the Options section inside the current container."""
        with ui.expansion("Options", value=False).classes("w-full"):
            ui.label("App Settings").classes("text-lg font-semibold")

            fields_info = self._app_config.get_all_fields_with_metadata()

            for field_name, field_info in fields_info.items():
                metadata = field_info["metadata"]
                label = metadata.get("label", field_name.replace("_", " ").title())

                with ui.row().classes("w-full items-center gap-4 mb-4"):
                    ui.label(label).classes("min-w-32 text-sm")
                    widget = self._create_widget_from_metadata(
                        field_name=field_name,
                        metadata=metadata,
                        current_value=field_info["value"],
                    )
                    widget.classes("flex-1")
                    self._widgets[field_name] = widget

                    if metadata.get("requires_restart", False):
                        ui.label("(restart required)").classes("text-xs text-gray-400")

    def _create_widget_from_metadata(
        self, field_name: str, metadata: dict[str, Any], current_value: Any
    ) -> ui.element:
        widget_type = metadata.get("widget_type", "input")

        if widget_type == "number":
            return ui.number(
                value=current_value,
                min=metadata.get("min"),
                max=metadata.get("max"),
                step=metadata.get("step", 1),
                format="%d",
                on_change=lambda e, fn=field_name: self._on_value_change(fn, e.value),
            )

        if widget_type == "checkbox":
            return ui.checkbox(
                value=bool(current_value),
                on_change=lambda e, fn=field_name: self._on_value_change(fn, e.value),
            )

        if widget_type == "display":
            return ui.label(str(current_value)).classes("font-mono text-sm")

        if widget_type != "input":
            logger.warning(f"Unknown widget_type '{widget_type}' for field '{field_name}', using input")
        return ui.input(
            value=str(current_value) if current_value is not None else "",
            on_change=lambda e, fn=field_name: self._on_value_change(fn, e.value),
        )

    def _on_value_change(self, field_name: str, new_value: Any) -> None:
        intent = _INTENT_FIELDS.get(field_name)
        if intent is not None:
            self._bus.emit(intent(value=bool(new_value)))
            return
        try:
            self._app_config.set_attribute(field_name, new_value)
            logger.info(f"App config updated: {field_name} = {new_value}")
        except (AttributeError, ValueError) as e:
            logger.error(f"Failed to update app config '{field_name}': {e}")
            ui.notify(f"Invalid value for {field_name}: {e}", type="negative")

    def _on_state_changed(self, e: HashStateChanged) -> None:
        safe_call(self._sync_from_config)

    def _sync_from_config(self) -> None:
        """Re-read toggles changed elsewhere and the live window rect."""
        for field_name, widget in self._widgets.items():
            value = self._app_config.get_attribute(field_name)
            if isinstance(widget, ui.checkbox):
                if widget.value != value:
                    widget.value = value
            elif isinstance(widget, ui.label):
                widget.text = str(value)
