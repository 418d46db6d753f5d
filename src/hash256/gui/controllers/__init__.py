# src/hash256/gui/controllers/__init__.py
"""Controllers coordinate events <-> AppState/backend."""

from hash256.gui.controllers.hash_controller import HashController

__all__ = [
    "HashController",
]
