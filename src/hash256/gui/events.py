"""Event definitions for the hashing page.

Views emit intent events when the user acts; HashController handles them,
updates AppState and emits state events that views use to refresh.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from hash256.core.progress import ProgressMessage

EventPhase = Literal["intent", "state"]


class PathOrigin(str, Enum):
    """Where a selected path came from. The controller treats all origins alike."""

    TEXT = "text"
    BROWSE = "browse"
    DROP = "drop"


@dataclass(frozen=True, slots=True)
class SelectPathEvent:
    """A path was typed, picked in the file dialog or dropped on the page.

    Attributes:
        path: Path text as entered or selected.
        origin: PathOrigin of the selection.
        phase: "intent" from views, "state" once AppState.path_text is updated.
    """

    path: str
    origin: PathOrigin = PathOrigin.TEXT
    phase: EventPhase = "intent"


@dataclass(frozen=True, slots=True)
class StartHash:
    """Hash the current path text now (Hash button or Enter in the path field)."""

    phase: EventPhase = "intent"


@dataclass(frozen=True, slots=True)
class CancelHash:
    """User pressed Cancel while a run is active."""

    phase: EventPhase = "intent"


@dataclass(frozen=True, slots=True)
class ClearHash:
    """Clear path, outputs and error."""

    phase: EventPhase = "intent"


@dataclass(frozen=True, slots=True)
class SetUppercase:
    value: bool
    phase: EventPhase = "intent"


@dataclass(frozen=True, slots=True)
class SetAutoHash:
    value: bool
    phase: EventPhase = "intent"


@dataclass(frozen=True, slots=True)
class HashProgress:
    """Progress of the active run, emitted on every poll tick that saw a change."""

    token: int
    progress: ProgressMessage
    phase: EventPhase = "state"


@dataclass(frozen=True, slots=True)
class HashStateChanged:
    """AppState changed; views re-read it.

    Attributes:
        is_running: A run is active.
        token: Active run token, or None when idle.
        error: Error message, or None.
    """

    is_running: bool
    token: Optional[int] = None
    error: Optional[str] = None
    phase: EventPhase = "state"
