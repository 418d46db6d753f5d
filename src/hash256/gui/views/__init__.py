# src/hash256/gui/views/__init__.py
"""Thin NiceGUI views that emit intent events and render AppState."""

from hash256.gui.views.about_view import AboutView
from hash256.gui.views.hash_view import HashView
from hash256.gui.views.options_view import OptionsView

__all__ = ["AboutView", "HashView", "OptionsView"]
