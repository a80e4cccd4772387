"""Application state threaded through every input and render handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from agentide.backends.base import BaseChatBackend, ChatMessage
from agentide.core.agent.effects import ProcessLauncher
from agentide.core.agent.executor import ActionExecutor, BatchReport
from agentide.core.agent.policy import SafetyPolicy
from agentide.core.conversation import Conversation
from agentide.core.events import (
    GLOBAL_BINDINGS,
    NAVIGATION_BINDINGS,
    AppCommand,
    InputEvent,
    KeyPress,
    MouseClick,
    MouseMove,
    MouseScroll,
    Resize,
)
from agentide.core.focus import DEFAULT_VISIBLE, FocusManager, FocusTarget, PanelRegion
from agentide.core.modes import Mode, ModeController
from agentide.core.notifications import NotificationEntry, NotificationSink
from agentide.core.orchestrator import ChatOrchestrator, ChatOutcome

if TYPE_CHECKING:
    from agentide.config.schema import AgentIdeConfig

logger = logging.getLogger(__name__)

_FOCUS_COMMANDS = {
    AppCommand.FOCUS_EXPLORER: FocusTarget.FILE_EXPLORER,
    AppCommand.FOCUS_EDITOR: FocusTarget.EDITOR,
    AppCommand.FOCUS_CHAT: FocusTarget.CHAT,
    AppCommand.FOCUS_NOTIFICATIONS: FocusTarget.NOTIFICATIONS,
}

# Commands the state applies itself; the rest are returned for the UI shell.
_UI_COMMANDS = frozenset(
    {AppCommand.REFRESH_TREE, AppCommand.SAVE, AppCommand.HELP, AppCommand.QUIT}
)


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a renderer needs for one frame. Read-only."""

    mode: Mode
    focus: FocusTarget
    visible: frozenset[FocusTarget]
    notifications: tuple[NotificationEntry, ...]
    messages: tuple[ChatMessage, ...]
    last_report: Optional[BatchReport]
    busy: bool
    project_root: Path

    @property
    def notifications_visible(self) -> bool:
        return FocusTarget.NOTIFICATIONS in self.visible


class AppState:
    """Owns the mode, focus, notifications and chat pipeline.

    Input handlers call :meth:`handle_event`; the renderer reads
    :meth:`snapshot` and reports measured geometry through
    :meth:`commit_frame`; the loop calls :meth:`tick`.
    """

    def __init__(
        self,
        notifications: NotificationSink,
        modes: ModeController,
        focus: FocusManager,
        executor: ActionExecutor,
        orchestrator: ChatOrchestrator,
    ) -> None:
        self.notifications = notifications
        self.modes = modes
        self.focus = focus
        self.executor = executor
        self.orchestrator = orchestrator
        self._sync_visible()

    @classmethod
    def from_config(
        cls,
        config: "AgentIdeConfig",
        backend: BaseChatBackend,
        project_root: Path | None = None,
    ) -> "AppState":
        policy = config.safety_policy(project_root)
        notifications = NotificationSink(config.ui.notification_capacity)
        modes = ModeController(notifications)
        focus = FocusManager(notifications, notify_hover=config.ui.notify_hover)
        executor = ActionExecutor(
            policy,
            modes,
            notifications,
            launcher=ProcessLauncher(timeout=config.safety.command_timeout_seconds),
        )
        conversation = Conversation(config.conversation.max_history)
        if config.conversation.system_prompt:
            conversation.add_system_message(config.conversation.system_prompt)
        orchestrator = ChatOrchestrator(
            backend, modes, notifications, executor, conversation
        )
        return cls(notifications, modes, focus, executor, orchestrator)

    @property
    def policy(self) -> SafetyPolicy:
        return self.executor.policy

    def expected_visible(self) -> frozenset[FocusTarget]:
        """Panels that should be on screen: the notifications list only when non-empty."""
        if self.notifications:
            return DEFAULT_VISIBLE | {FocusTarget.NOTIFICATIONS}
        return DEFAULT_VISIBLE

    def _sync_visible(self) -> None:
        self.focus.set_visible(self.expected_visible())

    # --- Input ---------------------------------------------------------------

    def handle_event(self, event: InputEvent) -> AppCommand | None:
        """Apply one input event.

        Returns:
            The command the event triggered, or None if the event was not
            consumed (for example a plain key that should reach a text
            widget). UI-only commands such as SAVE or QUIT are returned for
            the shell to carry out.
        """
        if isinstance(event, KeyPress):
            result = self._handle_key(event.key)
        elif isinstance(event, MouseClick):
            result = None
            if self.focus.assign_by_point(event.x, event.y) is not None:
                result = _FOCUS_FOR_TARGET[self.focus.current]
        elif isinstance(event, (MouseMove, MouseScroll)):
            self.focus.hover(event.x, event.y)
            result = None
        elif isinstance(event, Resize):
            # Geometry from before the resize is stale until the next frame.
            self.focus.commit_frame(())
            result = None
        else:
            logger.warning("Ignoring unknown input event %r", event)
            result = None
        self._sync_visible()
        return result

    def _handle_key(self, key: str) -> AppCommand | None:
        command = GLOBAL_BINDINGS.get(key)
        if command is None and self.modes.mode is not Mode.INSERT:
            command = NAVIGATION_BINDINGS.get(key)
        if command is None:
            logger.debug("Unbound key %s", key)
            return None
        if command in _UI_COMMANDS:
            return command
        return command if self.apply(command) else None

    def apply(self, command: AppCommand) -> bool:
        """Carry out a state command. Returns False when it was a no-op."""
        current = self.focus.current
        if command is AppCommand.TOGGLE_AGENTIC:
            return self.modes.toggle_agentic(current)
        if command is AppCommand.ENTER_INSERT:
            return self.modes.enter_insert(current)
        if command is AppCommand.CANCEL:
            return self.modes.cancel(current)
        if command is AppCommand.CYCLE_FOCUS:
            self.focus.cycle()
            return True
        if command in _FOCUS_COMMANDS:
            return self.focus.focus(_FOCUS_COMMANDS[command])
        if command is AppCommand.CLEAR_NOTIFICATIONS:
            self.notifications.clear()
            self._sync_visible()
            return True
        if command is AppCommand.CLEAR_CHAT:
            self.orchestrator.clear()
            self.notifications.info("Chat cleared")
            return True
        logger.warning("Command %s is not a state command", command.value)
        return False

    # --- Chat ----------------------------------------------------------------

    def send_chat(self, text: str) -> bool:
        sent = self.orchestrator.send(text)
        self._sync_visible()
        return sent

    def tick(self) -> ChatOutcome | None:
        """Once per loop iteration: apply a finished backend request."""
        outcome = self.orchestrator.poll()
        self._sync_visible()
        return outcome

    # --- Rendering -----------------------------------------------------------

    def commit_frame(self, regions: Iterable[PanelRegion]) -> None:
        """Record the panel geometry of the frame just drawn."""
        self.focus.commit_frame(regions)

    def snapshot(self) -> FrameSnapshot:
        return FrameSnapshot(
            mode=self.modes.mode,
            focus=self.focus.current,
            visible=self.focus.visible,
            notifications=self.notifications.snapshot(),
            messages=tuple(self.orchestrator.conversation.messages),
            last_report=self.orchestrator.last_report,
            busy=self.orchestrator.busy,
            project_root=Path(self.policy.project_root),
        )


_FOCUS_FOR_TARGET = {target: command for command, target in _FOCUS_COMMANDS.items()}
