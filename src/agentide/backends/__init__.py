"""Chat backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agentide.backends.base import BackendError, BaseChatBackend, ChatMessage

if TYPE_CHECKING:
    from agentide.config.schema import BackendConfig

__all__ = ["BackendError", "BaseChatBackend", "ChatMessage", "create_backend"]


def create_backend(config: "BackendConfig") -> BaseChatBackend:
    """Build the configured backend."""
    from agentide.backends.openai_compat import OpenAICompatBackend

    return OpenAICompatBackend(
        api_key=config.resolve_api_key(),
        model=config.model,
        base_url=config.base_url,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout_seconds,
        provider=config.provider,
    )
