from __future__ import annotations

import pytest

from agentide.core.conversation import Conversation


def test_history_is_bounded_and_keeps_system_messages() -> None:
    conversation = Conversation(max_history=5)
    conversation.add_system_message("be brief")

    for i in range(10):
        conversation.add_user_message(f"q{i}")

    messages = conversation.messages
    assert len(messages) == 5
    assert messages[0].role == "system"
    assert [m.content for m in messages[1:]] == ["q6", "q7", "q8", "q9"]


def test_system_message_goes_first() -> None:
    conversation = Conversation()
    conversation.add_user_message("hello")

    conversation.add_system_message("rules")

    assert conversation.messages[0].content == "rules"


def test_last_messages_and_pop_unanswered() -> None:
    conversation = Conversation()
    conversation.add_user_message("one")
    conversation.add_assistant_message("reply")
    conversation.add_user_message("two")

    assert conversation.last_user_message().content == "two"
    assert conversation.last_assistant_message().content == "reply"

    assert conversation.pop_unanswered().content == "two"
    assert conversation.pop_unanswered() is None
    assert len(conversation) == 2


def test_clear_keeps_system_messages() -> None:
    conversation = Conversation()
    conversation.add_system_message("rules")
    conversation.add_user_message("hello")

    conversation.clear()

    assert [m.role for m in conversation.messages] == ["system"]


def test_export_import_json() -> None:
    conversation = Conversation()
    conversation.add_user_message("hello")
    conversation.add_assistant_message("hi")

    restored = Conversation()
    restored.import_json(conversation.export_json())

    assert [(m.role, m.content) for m in restored.messages] == [
        ("user", "hello"),
        ("assistant", "hi"),
    ]


def test_import_rejects_bad_data() -> None:
    conversation = Conversation()

    with pytest.raises(ValueError):
        conversation.import_json('[{"role": "robot", "content": "x"}]')
    with pytest.raises(ValueError):
        conversation.import_json("not json")
