"""Base chat backend abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field


class BackendError(Exception):
    """The backend could not produce a reply (transport, status or payload)."""


class ChatMessage(BaseModel):
    """A single chat message."""

    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(frozen=True)

    def to_api(self) -> dict[str, Any]:
        """Wire form for OpenAI-style chat completion requests."""
        return {"role": self.role, "content": self.content}


class BaseChatBackend(ABC):
    """Abstract base class for AI chat backends.

    A backend turns the whole conversation into one reply. It holds no
    conversation state of its own.

    Example:
        class MyBackend(BaseChatBackend):
            @property
            def name(self) -> str:
                return "my-backend"

            async def complete(self, messages):
                return "hello"
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique backend identifier."""

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """Send the conversation and return the assistant reply.

        Raises:
            BackendError: If the request fails or the reply is malformed.
        """

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""
