"""Sidebar list of recent notifications."""

from __future__ import annotations

from typing import Sequence

from rich.text import Text
from textual.widgets import Static

from agentide.core.notifications import NotificationEntry, NotificationKind

KIND_STYLES = {
    NotificationKind.MOUSE_HOVER: ("~", "dim"),
    NotificationKind.MOUSE_CLICK: ("*", "cyan"),
    NotificationKind.FILE_OPERATION: ("#", "green"),
    NotificationKind.INFO: ("i", "blue"),
    NotificationKind.DEBUG: ("?", "yellow"),
}


def render_entries(entries: Sequence[NotificationEntry]) -> Text:
    """Newest first, one line per entry."""
    text = Text()
    for entry in reversed(entries):
        icon, style = KIND_STYLES.get(entry.kind, ("-", ""))
        text.append(f"{icon} ", style=style)
        text.append(entry.message)
        text.append(f" ({entry.age_label()})\n", style="dim")
    return text


class NotificationPanel(Static, can_focus=True):
    """Read-only view over the notification snapshot."""

    DEFAULT_CSS = """
    NotificationPanel {
        height: 12;
        border: round $secondary;
        border-title-color: $text-muted;
        padding: 0 1;
    }

    NotificationPanel:focus {
        border: round $accent;
    }
    """

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id)
        self.border_title = "Notifications"
        self._entries: tuple[NotificationEntry, ...] = ()

    def show(self, entries: tuple[NotificationEntry, ...]) -> None:
        self.display = bool(entries)
        if entries == self._entries:
            return
        self._entries = entries
        self.update(render_entries(entries))
