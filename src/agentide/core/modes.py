"""Interaction mode state machine.

Modes:
- NORMAL: navigation; chat replies are read-only assistance
- INSERT: typing into the editor
- AGENTIC: chat replies may carry actions that get executed

Transitions:
- NORMAL <-> AGENTIC on the toggle command, from any panel
- NORMAL -> INSERT only while the editor has focus
- INSERT -> NORMAL on cancel

Any other request is ignored.
"""

from __future__ import annotations

import logging
from enum import Enum

from agentide.core.focus import FocusTarget
from agentide.core.notifications import NotificationSink

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Application-wide interaction mode."""

    NORMAL = "NORMAL"
    INSERT = "INSERT"
    AGENTIC = "AGENTIC"


class ModeCommand(str, Enum):
    """User commands that may change the mode."""

    TOGGLE_AGENTIC = "toggle_agentic"
    INSERT = "insert"
    CANCEL = "cancel"


class ModeController:
    """Owns the current mode and applies transition rules."""

    def __init__(self, notifications: NotificationSink) -> None:
        self._notifications = notifications
        self._mode = Mode.NORMAL

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_agentic(self) -> bool:
        return self._mode is Mode.AGENTIC

    def request(self, command: ModeCommand, focus: FocusTarget) -> bool:
        """Apply a mode command.

        Returns:
            True if the mode changed, False if the request was a no-op.
        """
        target = self._next_mode(command, focus)
        if target is None:
            logger.debug("Ignored %s in %s mode", command.value, self._mode.value)
            return False

        self._mode = target
        self._notifications.info(f"Mode: {target.value}")
        logger.info("Mode changed to %s", target.value)
        return True

    def toggle_agentic(self, focus: FocusTarget) -> bool:
        return self.request(ModeCommand.TOGGLE_AGENTIC, focus)

    def enter_insert(self, focus: FocusTarget) -> bool:
        return self.request(ModeCommand.INSERT, focus)

    def cancel(self, focus: FocusTarget) -> bool:
        return self.request(ModeCommand.CANCEL, focus)

    def _next_mode(self, command: ModeCommand, focus: FocusTarget) -> Mode | None:
        current = self._mode
        if command is ModeCommand.TOGGLE_AGENTIC:
            if current is Mode.NORMAL:
                return Mode.AGENTIC
            if current is Mode.AGENTIC:
                return Mode.NORMAL
            return None
        if command is ModeCommand.INSERT:
            if current is Mode.NORMAL and focus is FocusTarget.EDITOR:
                return Mode.INSERT
            return None
        if command is ModeCommand.CANCEL:
            if current is Mode.INSERT:
                return Mode.NORMAL
            return None
        return None

    def reset(self) -> None:
        """Fall back to NORMAL without a notification."""
        if self._mode is not Mode.NORMAL:
            logger.warning("Resetting mode from %s to NORMAL", self._mode.value)
        self._mode = Mode.NORMAL
