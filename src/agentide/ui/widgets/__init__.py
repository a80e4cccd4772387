"""Custom widgets for the agentide TUI."""

from agentide.ui.widgets.chat_panel import ChatPanel
from agentide.ui.widgets.mode_indicator import ModeIndicator
from agentide.ui.widgets.notification_panel import NotificationPanel

__all__ = ["ChatPanel", "ModeIndicator", "NotificationPanel"]
