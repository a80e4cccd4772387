"""Main agentide TUI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from textual import events
from textual.actions import SkipAction
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import DirectoryTree, Static, TextArea

from agentide.backends import create_backend
from agentide.config.schema import AgentIdeConfig
from agentide.core.agent.effects import is_probably_text, read_text_file
from agentide.core.events import (
    GLOBAL_BINDINGS,
    HELP_TEXT,
    NAVIGATION_BINDINGS,
    AppCommand,
    InputEvent,
    KeyPress,
    MouseClick,
    MouseMove,
    MouseScroll,
    Resize,
)
from agentide.core.focus import FocusTarget, PanelRegion
from agentide.core.modes import Mode
from agentide.core.notifications import NotificationKind
from agentide.core.state import AppState
from agentide.ui.widgets import ChatPanel, ModeIndicator, NotificationPanel

logger = logging.getLogger(__name__)

PANEL_IDS = {
    FocusTarget.FILE_EXPLORER: "explorer",
    FocusTarget.EDITOR: "editor",
    FocusTarget.CHAT: "chat",
    FocusTarget.NOTIFICATIONS: "notifications",
}


def _routed_bindings() -> list[Binding]:
    keys = {**GLOBAL_BINDINGS, **NAVIGATION_BINDINGS}
    return [
        Binding(key, f"route_key({key!r})", command.value.replace("_", " "), show=False, priority=True)
        for key, command in keys.items()
    ]


class AgentIdeApp(App):
    """Terminal IDE with an AI chat that can act on the project.

    Every key, click, move and scroll goes through :class:`AppState`; after
    each refresh the visible panels are measured and committed as the frame
    that hit-testing will use.
    """

    TITLE = "agentide"

    CSS = """
    #main {
        height: 1fr;
    }

    #sidebar {
        height: 1fr;
    }

    #explorer {
        height: 1fr;
        border: round $secondary;
    }

    #explorer:focus {
        border: round $accent;
    }

    #workspace {
        width: 1fr;
    }

    #editor {
        height: 1fr;
    }

    #status {
        height: 1;
        background: $panel;
    }

    #status-text {
        width: 1fr;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = _routed_bindings()

    def __init__(self, config: AgentIdeConfig, state: AppState) -> None:
        super().__init__()
        self.config = config
        self.state = state
        self.current_file: Optional[Path] = None
        self._ready = False

    def compose(self) -> ComposeResult:
        root = Path(self.state.policy.project_root)
        with Horizontal(id="main"):
            with Vertical(id="sidebar"):
                yield DirectoryTree(root, id="explorer")
                yield NotificationPanel(id="notifications")
            with Vertical(id="workspace"):
                editor = TextArea(id="editor", read_only=True, tab_behavior="indent")
                editor.border_title = "Editor"
                yield editor
                yield ChatPanel(id="chat")
        with Horizontal(id="status"):
            yield ModeIndicator(id="mode")
            yield Static(id="status-text")

    def on_mount(self) -> None:
        self.query_one("#sidebar").styles.width = self.config.ui.sidebar_width
        self.query_one("#chat").styles.height = self.config.ui.chat_height
        self.set_interval(self.config.ui.tick_interval, self._on_tick)
        self.call_after_refresh(self._first_sync)

    # --- State plumbing ------------------------------------------------------

    def _first_sync(self) -> None:
        self._ready = True
        self._sync()

    def _panel(self, target: FocusTarget) -> Widget:
        return self.query_one(f"#{PANEL_IDS[target]}")

    def _sync(self) -> None:
        """Push the state snapshot into the widgets, then commit the frame."""
        if not self._ready:
            return
        snapshot = self.state.snapshot()

        self.query_one("#notifications", NotificationPanel).show(
            snapshot.notifications if snapshot.notifications_visible else ()
        )
        self.query_one("#chat", ChatPanel).show(
            snapshot.messages, snapshot.last_report, snapshot.busy
        )
        self.query_one("#mode", ModeIndicator).mode = snapshot.mode
        self.query_one("#editor", TextArea).read_only = snapshot.mode is not Mode.INSERT

        file_label = self._file_label(snapshot.project_root)
        busy = " | AI thinking..." if snapshot.busy else ""
        self.query_one("#status-text", Static).update(
            f"{snapshot.focus.label} | {file_label} | {snapshot.project_root}{busy} | Ctrl+H help"
        )

        panel = self._panel(snapshot.focus)
        if not panel.has_focus and not panel.has_focus_within:
            panel.focus()

        self.call_after_refresh(self._commit_frame)

    def _file_label(self, root: Path) -> str:
        if self.current_file is None:
            return "no file"
        try:
            return str(self.current_file.relative_to(root))
        except ValueError:
            return str(self.current_file)

    def _commit_frame(self) -> None:
        regions = []
        for target, widget_id in PANEL_IDS.items():
            widget = self.query_one(f"#{widget_id}")
            if not widget.display:
                continue
            region = widget.region
            if region.width <= 0 or region.height <= 0:
                continue
            regions.append(
                PanelRegion(target, region.x, region.y, region.width, region.height)
            )
        self.state.commit_frame(regions)

    def _dispatch(self, event: InputEvent) -> AppCommand | None:
        command = self.state.handle_event(event)
        if command is not None:
            self._run_ui_command(command)
        self._sync()
        return command

    def _on_tick(self) -> None:
        outcome = self.state.tick()
        if outcome is None:
            return
        if outcome.report is not None and outcome.report.tree_changed:
            self._reload_tree()
        self._sync()

    # --- Input ---------------------------------------------------------------

    def action_route_key(self, key: str) -> None:
        if self._dispatch(KeyPress(key)) is None:
            # Not consumed: let the focused widget have the key.
            raise SkipAction()

    async def on_event(self, event: events.Event) -> None:
        if isinstance(event, events.MouseDown):
            self._dispatch(MouseClick(event.screen_x, event.screen_y, event.button))
        elif isinstance(event, events.MouseMove):
            before = self.state.notifications.snapshot()[-1:]
            self.state.handle_event(MouseMove(event.screen_x, event.screen_y))
            if self.state.notifications.snapshot()[-1:] != before:
                self._sync()
        elif isinstance(event, events.MouseScrollDown):
            self._dispatch(MouseScroll(event.screen_x, event.screen_y, "down"))
        elif isinstance(event, events.MouseScrollUp):
            self._dispatch(MouseScroll(event.screen_x, event.screen_y, "up"))
        await super().on_event(event)

    def on_resize(self, event: events.Resize) -> None:
        self._dispatch(Resize(event.size.width, event.size.height))

    def on_chat_panel_submitted(self, message: ChatPanel.Submitted) -> None:
        self.state.send_chat(message.text)
        self._sync()

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        self._open_file(Path(event.path))

    # --- UI commands ---------------------------------------------------------

    def _run_ui_command(self, command: AppCommand) -> None:
        if command is AppCommand.QUIT:
            self.exit()
        elif command is AppCommand.SAVE:
            self._save_file()
        elif command is AppCommand.REFRESH_TREE:
            self._reload_tree()
            self.state.notifications.info("File tree refreshed")
        elif command is AppCommand.HELP:
            self.notify(HELP_TEXT, title="Keys", timeout=8)

    def _reload_tree(self) -> None:
        self.query_one("#explorer", DirectoryTree).reload()

    def _open_file(self, path: Path) -> None:
        if not is_probably_text(path):
            self.state.notifications.info(f"Not a text file: {path.name}")
            self._sync()
            return
        try:
            content = read_text_file(path)
        except OSError as exc:
            logger.warning("Failed to open %s: %s", path, exc)
            self.state.notifications.info(f"Failed to open {path.name}: {exc}")
            self._sync()
            return

        editor = self.query_one("#editor", TextArea)
        editor.load_text(content)
        language = path.suffix.lstrip(".").lower()
        editor.language = language if language in editor.available_languages else None
        editor.border_title = path.name
        self.current_file = path
        self.state.notifications.append(NotificationKind.FILE_OPERATION, f"Opened {path.name}")
        self._sync()

    def _save_file(self) -> None:
        if self.current_file is None:
            self.state.notifications.info("No file open")
            return
        text = self.query_one("#editor", TextArea).text
        try:
            self.current_file.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save %s: %s", self.current_file, exc)
            self.state.notifications.info(f"Failed to save {self.current_file.name}: {exc}")
            return
        self.state.notifications.append(
            NotificationKind.FILE_OPERATION, f"Saved {self.current_file.name}"
        )

    async def on_unmount(self) -> None:
        await self.state.orchestrator.close()


def run(config: AgentIdeConfig, project_root: Optional[Path] = None) -> None:
    """Entry point for running the TUI."""
    state = AppState.from_config(config, create_backend(config.backend), project_root)
    app = AgentIdeApp(config, state)
    app.run()
