"""Chat backend for OpenAI-compatible REST APIs (Groq by default)."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Sequence

import aiohttp

from agentide.backends.base import BackendError, BaseChatBackend, ChatMessage

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


def _normalize_base_url(base_url: str) -> str:
    return base_url.rstrip("/")


class OpenAICompatBackend(BaseChatBackend):
    """Non-streaming ``/chat/completions`` client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "llama-3.1-70b-versatile",
        base_url: str = GROQ_BASE_URL,
        temperature: float = 0.7,
        max_tokens: Optional[int] = 4096,
        timeout: float = 60.0,
        provider: str = "groq",
    ):
        self._api_key = api_key or os.environ.get("GROQ_API_KEY")
        self._model = model
        self._base_url = _normalize_base_url(base_url)
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._provider = provider
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return self._provider

    @property
    def display_name(self) -> str:
        return f"{self._provider} ({self._model})"

    @property
    def model(self) -> str:
        return self._model

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def build_payload(self, messages: Sequence[ChatMessage]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [message.to_api() for message in messages],
            "temperature": self._temperature,
            "stream": False,
        }
        if self._max_tokens:
            payload["max_tokens"] = self._max_tokens
        return payload

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._build_headers(),
            )
        return self._session

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        if not self._api_key:
            raise BackendError(
                "API key not configured. Run: agentide config --api-key YOUR_KEY"
            )

        url = f"{self._base_url}/chat/completions"
        try:
            async with self._get_session().post(url, json=self.build_payload(messages)) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    logger.error("%s returned status %s: %s", self._provider, resp.status, error_text)
                    raise BackendError(f"{self._provider} API error {resp.status}: {error_text[:200]}")
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise BackendError(f"request failed: {exc}") from exc
        except TimeoutError as exc:
            raise BackendError(f"request timed out after {self._timeout:g}s") from exc
        except ValueError as exc:
            raise BackendError(f"malformed response: {exc}") from exc

        return extract_reply(data)

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None


def extract_reply(data: Any) -> str:
    """Pull the first choice's message content out of a completion payload."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise BackendError("malformed response: no choices in reply") from exc
    if not isinstance(content, str):
        raise BackendError("malformed response: message content is not text")
    return content
