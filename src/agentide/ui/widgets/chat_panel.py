"""Chat transcript with an input line."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Input, Static

from agentide.backends.base import ChatMessage
from agentide.core.agent.executor import BatchReport, format_report

ROLE_STYLES = {
    "user": ("You", "bold cyan"),
    "assistant": ("AI", "bold magenta"),
}


def render_transcript(
    messages: Sequence[ChatMessage],
    report: Optional[BatchReport],
    busy: bool,
) -> Text:
    text = Text()
    for message in messages:
        if message.role == "system":
            continue
        label, style = ROLE_STYLES[message.role]
        text.append(f"{label}: ", style=style)
        text.append(message.content.rstrip() + "\n\n")
    if report is not None:
        text.append(format_report(report) + "\n", style="dim")
    if busy:
        text.append("AI is thinking...\n", style="italic yellow")
    return text


class ChatPanel(Vertical, can_focus=True):
    """Transcript above, prompt below. Posts :class:`ChatPanel.Submitted`."""

    DEFAULT_CSS = """
    ChatPanel {
        border: round $secondary;
        border-title-color: $text-muted;
    }

    ChatPanel:focus-within {
        border: round $accent;
    }

    ChatPanel #chat-log {
        height: 1fr;
    }

    ChatPanel Input {
        dock: bottom;
    }
    """

    class Submitted(Message):
        def __init__(self, text: str) -> None:
            super().__init__()
            self.text = text

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id)
        self.border_title = "AI Chat"
        self._rendered: tuple[int, int, bool] | None = None

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="chat-log"):
            yield Static(id="chat-transcript")
        yield Input(placeholder="Ask the AI (Ctrl+A toggles agentic mode)", id="chat-input")

    def on_focus(self) -> None:
        self.query_one("#chat-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        text = event.value
        event.input.value = ""
        if text.strip():
            self.post_message(self.Submitted(text))

    def show(
        self,
        messages: Sequence[ChatMessage],
        report: Optional[BatchReport],
        busy: bool,
    ) -> None:
        key = (len(messages), id(report), busy)
        if key == self._rendered:
            return
        self._rendered = key
        self.query_one("#chat-transcript", Static).update(
            render_transcript(messages, report, busy)
        )
        self.query_one("#chat-log", VerticalScroll).scroll_end(animate=False)
