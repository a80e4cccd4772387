"""Normalized input events and key bindings.

The UI shell converts whatever its toolkit delivers into these dataclasses
and hands them to :meth:`agentide.core.state.AppState.handle_event`. Key
names follow textual's spelling (``ctrl+a``, ``alt+1``, ``escape``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class MouseMove:
    x: int
    y: int


@dataclass(frozen=True)
class MouseClick:
    x: int
    y: int
    button: int = 1


@dataclass(frozen=True)
class MouseScroll:
    x: int
    y: int
    direction: str = "down"


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


InputEvent = Union[KeyPress, MouseMove, MouseClick, MouseScroll, Resize]


class AppCommand(str, Enum):
    """Commands a key press can trigger."""

    TOGGLE_AGENTIC = "toggle_agentic"
    ENTER_INSERT = "enter_insert"
    CANCEL = "cancel"
    CYCLE_FOCUS = "cycle_focus"
    FOCUS_EXPLORER = "focus_explorer"
    FOCUS_EDITOR = "focus_editor"
    FOCUS_CHAT = "focus_chat"
    FOCUS_NOTIFICATIONS = "focus_notifications"
    CLEAR_NOTIFICATIONS = "clear_notifications"
    CLEAR_CHAT = "clear_chat"
    REFRESH_TREE = "refresh_tree"
    SAVE = "save"
    HELP = "help"
    QUIT = "quit"


# Bindings active in every mode.
GLOBAL_BINDINGS: dict[str, AppCommand] = {
    "ctrl+a": AppCommand.TOGGLE_AGENTIC,
    "ctrl+k": AppCommand.CLEAR_NOTIFICATIONS,
    "ctrl+l": AppCommand.CLEAR_CHAT,
    "ctrl+r": AppCommand.REFRESH_TREE,
    "ctrl+s": AppCommand.SAVE,
    "ctrl+h": AppCommand.HELP,
    "ctrl+q": AppCommand.QUIT,
    "alt+1": AppCommand.FOCUS_EXPLORER,
    "alt+2": AppCommand.FOCUS_EDITOR,
    "alt+3": AppCommand.FOCUS_CHAT,
    "escape": AppCommand.CANCEL,
}

# Bindings only active outside INSERT mode; in INSERT mode these keys are text.
NAVIGATION_BINDINGS: dict[str, AppCommand] = {
    "tab": AppCommand.CYCLE_FOCUS,
    "i": AppCommand.ENTER_INSERT,
}

HELP_TEXT = """\
Ctrl+A  toggle agentic mode
Tab     cycle focus
i       insert mode (editor)
Esc     back to normal mode
Alt+1/2/3  focus explorer / editor / chat
Ctrl+S  save file
Ctrl+K  clear notifications
Ctrl+L  clear chat
Ctrl+R  refresh file tree
Ctrl+H  this help
Ctrl+Q  quit"""
