from __future__ import annotations

import pytest

from agentide.backends import create_backend
from agentide.backends.base import BackendError, ChatMessage
from agentide.backends.openai_compat import GROQ_BASE_URL, OpenAICompatBackend, extract_reply
from agentide.config.schema import BackendConfig


def test_payload_uses_openai_shape() -> None:
    backend = OpenAICompatBackend(api_key="k", model="m", max_tokens=128, temperature=0.2)
    messages = [
        ChatMessage(role="system", content="rules"),
        ChatMessage(role="user", content="hi"),
    ]

    payload = backend.build_payload(messages)

    assert payload == {
        "model": "m",
        "messages": [
            {"role": "system", "content": "rules"},
            {"role": "user", "content": "hi"},
        ],
        "temperature": 0.2,
        "stream": False,
        "max_tokens": 128,
    }


def test_extract_reply() -> None:
    data = {"choices": [{"message": {"role": "assistant", "content": "hello"}}]}

    assert extract_reply(data) == "hello"


@pytest.mark.parametrize(
    "data",
    [{}, {"choices": []}, {"choices": [{"message": {"content": None}}]}, None],
)
def test_extract_reply_rejects_malformed(data: object) -> None:
    with pytest.raises(BackendError):
        extract_reply(data)


@pytest.mark.asyncio
async def test_missing_api_key_fails_without_request(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    backend = OpenAICompatBackend(api_key=None)

    with pytest.raises(BackendError, match="API key"):
        await backend.complete([ChatMessage(role="user", content="hi")])
    await backend.close()


def test_create_backend_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CUSTOM_KEY", "abc")
    config = BackendConfig(
        base_url=GROQ_BASE_URL + "/",
        model="llama3",
        api_key_env="CUSTOM_KEY",
    )

    backend = create_backend(config)

    assert isinstance(backend, OpenAICompatBackend)
    assert backend.model == "llama3"
    assert backend.display_name == "groq (llama3)"
