"""Chat orchestration: one backend request at a time, actions on completion.

The backend call runs as a background asyncio task. The task never touches
application state; it only drops its outcome into a single-slot queue. The
event loop calls :meth:`ChatOrchestrator.poll` once per iteration, and that
is where the conversation, the notifications and the executor are updated.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from agentide.backends.base import BackendError, BaseChatBackend, ChatMessage
from agentide.core.agent.executor import ActionExecutor, BatchReport
from agentide.core.agent.parser import ACTION_INSTRUCTIONS, ParseError, parse_actions
from agentide.core.conversation import Conversation
from agentide.core.modes import ModeController
from agentide.core.notifications import NotificationSink

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "AI request already in progress"


@dataclass
class ChatOutcome:
    """What one backend request produced once it was applied."""

    reply: Optional[str] = None
    error: Optional[str] = None
    parse_errors: list[ParseError] = field(default_factory=list)
    report: Optional[BatchReport] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ChatOrchestrator:
    """Owns the conversation and at most one in-flight backend request."""

    def __init__(
        self,
        backend: BaseChatBackend,
        modes: ModeController,
        notifications: NotificationSink,
        executor: ActionExecutor,
        conversation: Conversation | None = None,
    ) -> None:
        self.backend = backend
        self.modes = modes
        self.notifications = notifications
        self.executor = executor
        self.conversation = conversation if conversation is not None else Conversation()
        self._task: asyncio.Task[None] | None = None
        self._outcomes: asyncio.Queue[ChatOutcome] = asyncio.Queue(maxsize=1)
        self.last_report: BatchReport | None = None

    @property
    def busy(self) -> bool:
        """True from :meth:`send` until the outcome has been polled."""
        return self._task is not None

    def _request_messages(self) -> list[ChatMessage]:
        messages = self.conversation.messages
        if self.modes.is_agentic:
            messages.insert(0, ChatMessage(role="system", content=ACTION_INSTRUCTIONS))
        return messages

    def send(self, text: str) -> bool:
        """Start a backend request for ``text``.

        Returns:
            True if a request was started. Blank input and requests made
            while another one is outstanding return False.
        """
        if not text.strip():
            return False
        if self.busy:
            self.notifications.info(BUSY_MESSAGE)
            logger.info("Rejected chat message while busy")
            return False

        self.conversation.add_user_message(text)
        self._task = asyncio.create_task(self._request(self._request_messages()))
        return True

    async def _request(self, messages: list[ChatMessage]) -> None:
        try:
            reply = await self.backend.complete(messages)
        except BackendError as exc:
            logger.error("Backend %s failed: %s", self.backend.name, exc)
            outcome = ChatOutcome(error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected backend failure")
            outcome = ChatOutcome(error=f"unexpected error: {exc}")
        else:
            outcome = ChatOutcome(reply=reply)
        self._outcomes.put_nowait(outcome)

    def poll(self) -> ChatOutcome | None:
        """Apply a finished request, if there is one. Never blocks."""
        try:
            outcome = self._outcomes.get_nowait()
        except asyncio.QueueEmpty:
            return None
        self._task = None

        if not outcome.ok:
            self.conversation.pop_unanswered()
            self.notifications.info(f"AI request failed: {outcome.error}")
            return outcome

        self.conversation.add_assistant_message(outcome.reply or "")
        if self.modes.is_agentic:
            self._run_actions(outcome)
        return outcome

    def _run_actions(self, outcome: ChatOutcome) -> None:
        parsed = parse_actions(outcome.reply or "")
        for error in parsed.errors:
            self.notifications.debug(f"Action parse error: {error}")
        outcome.parse_errors = list(parsed.errors)
        if parsed.actions:
            outcome.report = self.executor.execute(parsed.actions)
            self.last_report = outcome.report

    async def wait(self) -> ChatOutcome | None:
        """Wait for the outstanding request, then apply it."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self.poll()

    def clear(self) -> None:
        """Forget the chat history (system messages stay)."""
        self.conversation.clear()
        self.last_report = None

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        await self.backend.close()
