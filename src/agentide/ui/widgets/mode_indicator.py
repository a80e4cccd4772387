"""Vim-style mode indicator widget.

Displays the current interaction mode in the status bar:
- NORMAL: Navigation, chat replies are read-only
- INSERT: Editor accepts text
- AGENTIC: Chat replies may act on the project

The indicator uses color coding for quick recognition:
- NORMAL: Primary color
- INSERT: Success/green
- AGENTIC: Error/red, since actions can change files
"""

from __future__ import annotations

from textual.reactive import reactive
from textual.widgets import Static

from agentide.core.modes import Mode


class ModeIndicator(Static):
    """Widget that displays the current interaction mode."""

    DEFAULT_CSS = """
    ModeIndicator {
        width: auto;
        height: 1;
        padding: 0 1;
        text-style: bold;
    }

    ModeIndicator.mode-normal {
        background: $primary;
        color: $text;
    }

    ModeIndicator.mode-insert {
        background: $success;
        color: $text;
    }

    ModeIndicator.mode-agentic {
        background: $error;
        color: $text;
    }
    """

    mode: reactive[Mode] = reactive(Mode.NORMAL)

    def __init__(
        self,
        mode: Mode = Mode.NORMAL,
        id: str | None = None,
    ) -> None:
        super().__init__(id=id)
        self.mode = mode

    def render(self) -> str:
        return f" {self.mode.value} "

    def watch_mode(self, old_mode: Mode, new_mode: Mode) -> None:
        self.remove_class(f"mode-{old_mode.value.lower()}")
        self.add_class(f"mode-{new_mode.value.lower()}")
        self.refresh()

    def on_mount(self) -> None:
        self.add_class(f"mode-{self.mode.value.lower()}")
