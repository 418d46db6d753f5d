"""OptionsView value handling, without rendering widgets."""

from __future__ import annotations

from pathlib import Path

import pytest

from hash256.gui.app_config import DEFAULT_POLL_INTERVAL_MS, AppConfig
from hash256.gui.controllers import hash_controller as hc
from hash256.gui.controllers.hash_controller import HashController
from hash256.gui.events import SetUppercase
from hash256.gui.views import options_view
from hash256.gui.views.options_view import OptionsView


@pytest.fixture(autouse=True)
def _no_window_title(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(hc, "set_window_title_for_state", lambda _state: None)


@pytest.fixture
def cfg(tmp_path: Path) -> AppConfig:
    return AppConfig.load(config_path=tmp_path / "app_config.json")


@pytest.fixture
def notifications(monkeypatch: pytest.MonkeyPatch) -> list[tuple]:
    calls: list[tuple] = []
    monkeypatch.setattr(options_view.ui, "notify", lambda message, **kwargs: calls.append((message, kwargs)))
    return calls


def test_poll_interval_is_written_to_config(cfg, bus, notifications) -> None:
    view = OptionsView(cfg, bus)
    # ui.number reports floats
    view._on_value_change("poll_interval_ms", 40.0)
    assert cfg.data.poll_interval_ms == 40
    assert cfg.get_poll_interval_s() == 0.04
    assert notifications == []


@pytest.mark.parametrize("bad_value", [5, 5000, None])
def test_invalid_poll_interval_notifies_and_keeps_config(cfg, bus, notifications, bad_value) -> None:
    view = OptionsView(cfg, bus)
    view._on_value_change("poll_interval_ms", bad_value)
    assert cfg.data.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
    assert len(notifications) == 1
    assert notifications[0][1]["type"] == "negative"


def test_toggles_go_through_the_bus(cfg, bus) -> None:
    seen: list[SetUppercase] = []
    bus.subscribe_intent(SetUppercase, seen.append)

    view = OptionsView(cfg, bus)
    view._on_value_change("uppercase", True)

    assert seen == [SetUppercase(value=True)]
    # nobody handled the intent, so the config is untouched
    assert cfg.get_uppercase() is False


def test_toggles_update_state_and_config_with_controller(cfg, bus, app_state, timers) -> None:
    ctrl = HashController(app_state, bus, cfg, ui_timer_factory=timers)
    view = OptionsView(cfg, bus)

    view._on_value_change("uppercase", True)
    view._on_value_change("auto_hash", False)

    assert app_state.uppercase is True
    assert app_state.auto_hash is False
    assert cfg.get_uppercase() is True
    assert cfg.get_auto_hash() is False
    ctrl.shutdown()
