"""Bounded chat history sent to the backend."""

from __future__ import annotations

import json
import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from agentide.backends.base import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 50


class Conversation:
    """Ordered list of chat messages with a history cap.

    When the cap is exceeded the oldest non-system messages are dropped.
    System messages are always kept.
    """

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.max_history = max_history
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def add_message(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        self._trim()
        return message

    def add_user_message(self, content: str) -> ChatMessage:
        return self.add_message("user", content)

    def add_assistant_message(self, content: str) -> ChatMessage:
        return self.add_message("assistant", content)

    def add_system_message(self, content: str) -> ChatMessage:
        """Insert a system message ahead of everything else."""
        message = ChatMessage(role="system", content=content)
        self._messages.insert(0, message)
        self._trim()
        return message

    def _trim(self) -> None:
        overflow = len(self._messages) - self.max_history
        if overflow <= 0:
            return
        kept: list[ChatMessage] = []
        for message in self._messages:
            if overflow > 0 and message.role != "system":
                overflow -= 1
                continue
            kept.append(message)
        self._messages = kept

    def _last_with_role(self, role: str) -> Optional[ChatMessage]:
        for message in reversed(self._messages):
            if message.role == role:
                return message
        return None

    def last_user_message(self) -> Optional[ChatMessage]:
        return self._last_with_role("user")

    def last_assistant_message(self) -> Optional[ChatMessage]:
        return self._last_with_role("assistant")

    def pop_unanswered(self) -> Optional[ChatMessage]:
        """Remove the trailing user message if no reply followed it."""
        if self._messages and self._messages[-1].role == "user":
            return self._messages.pop()
        return None

    def clear(self) -> None:
        """Drop everything except system messages."""
        self._messages = [m for m in self._messages if m.role == "system"]

    def export_json(self) -> str:
        return json.dumps(
            [message.model_dump(mode="json") for message in self._messages],
            indent=2,
        )

    def import_json(self, data: str) -> None:
        """Replace the history with messages from :meth:`export_json` output."""
        try:
            raw = json.loads(data)
            if not isinstance(raw, list):
                raise ValueError("expected a JSON list of messages")
            messages = [ChatMessage.model_validate(item) for item in raw]
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ValueError(f"invalid conversation data: {exc}") from exc
        self._messages = messages
        self._trim()
        logger.debug("Imported %d messages", len(self._messages))

    def extend(self, messages: Iterable[ChatMessage]) -> None:
        self._messages.extend(messages)
        self._trim()
