from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence

import pytest

from agentide.backends.base import BackendError, BaseChatBackend, ChatMessage
from agentide.core.agent.executor import ActionExecutor
from agentide.core.agent.parser import ACTION_INSTRUCTIONS
from agentide.core.agent.policy import SafetyPolicy
from agentide.core.conversation import Conversation
from agentide.core.focus import FocusTarget
from agentide.core.modes import ModeController
from agentide.core.notifications import NotificationKind, NotificationSink
from agentide.core.orchestrator import BUSY_MESSAGE, ChatOrchestrator


class StubBackend(BaseChatBackend):
    """Backend stub that records requests and returns canned replies."""

    def __init__(self, replies: list[str] | None = None, error: str | None = None) -> None:
        self.replies = list(replies or ["stub response"])
        self.error = error
        self.requests: list[list[ChatMessage]] = []
        self.release = asyncio.Event()
        self.release.set()
        self.closed = False

    @property
    def name(self) -> str:
        return "stub"

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        self.requests.append(list(messages))
        await self.release.wait()
        if self.error:
            raise BackendError(self.error)
        return self.replies.pop(0)

    async def close(self) -> None:
        self.closed = True


def make_orchestrator(
    backend: BaseChatBackend, root: Path, agentic: bool = False
) -> tuple[ChatOrchestrator, NotificationSink, ModeController]:
    sink = NotificationSink()
    modes = ModeController(sink)
    if agentic:
        modes.toggle_agentic(FocusTarget.CHAT)
    sink.clear()
    executor = ActionExecutor(SafetyPolicy.create(root), modes, sink)
    return ChatOrchestrator(backend, modes, sink, executor, Conversation()), sink, modes


@pytest.mark.asyncio
async def test_reply_is_appended_after_poll(tmp_path: Path) -> None:
    backend = StubBackend(["hi there"])
    chat, sink, _ = make_orchestrator(backend, tmp_path)

    assert chat.send("hello") is True
    assert chat.busy

    outcome = await chat.wait()

    assert outcome is not None and outcome.ok
    assert not chat.busy
    roles = [m.role for m in chat.conversation.messages]
    assert roles == ["user", "assistant"]
    assert chat.conversation.last_assistant_message().content == "hi there"
    assert len(sink) == 0


@pytest.mark.asyncio
async def test_blank_input_is_ignored(tmp_path: Path) -> None:
    chat, _, _ = make_orchestrator(StubBackend(), tmp_path)

    assert chat.send("   ") is False
    assert not chat.busy
    assert len(chat.conversation) == 0


@pytest.mark.asyncio
async def test_second_send_while_busy_is_rejected(tmp_path: Path) -> None:
    backend = StubBackend(["first"])
    backend.release.clear()
    chat, sink, _ = make_orchestrator(backend, tmp_path)

    assert chat.send("one") is True
    assert chat.send("two") is False

    assert sink.snapshot()[-1].kind is NotificationKind.INFO
    assert sink.snapshot()[-1].message == BUSY_MESSAGE
    assert [m.content for m in chat.conversation.messages] == ["one"]

    backend.release.set()
    await chat.wait()
    assert len(backend.requests) == 1


@pytest.mark.asyncio
async def test_poll_before_completion_returns_none(tmp_path: Path) -> None:
    backend = StubBackend()
    backend.release.clear()
    chat, _, _ = make_orchestrator(backend, tmp_path)
    chat.send("hello")
    await asyncio.sleep(0)

    assert chat.poll() is None
    assert chat.busy

    backend.release.set()
    assert (await chat.wait()) is not None


@pytest.mark.asyncio
async def test_transport_failure_leaves_no_trace(tmp_path: Path) -> None:
    chat, sink, _ = make_orchestrator(StubBackend(error="connection refused"), tmp_path)

    chat.send("hello")
    outcome = await chat.wait()

    assert outcome is not None and not outcome.ok
    assert len(chat.conversation) == 0
    assert sink.count(NotificationKind.INFO) == 1
    assert "connection refused" in sink.snapshot()[-1].message
    assert not chat.busy


@pytest.mark.asyncio
async def test_agentic_reply_runs_actions(tmp_path: Path) -> None:
    reply = (
        "Writing the file.\n"
        "```action\nwrite_file path=notes.txt content=hello\n```\n"
        "```action\nwrite_file\n```\n"
    )
    backend = StubBackend([reply])
    chat, sink, _ = make_orchestrator(backend, tmp_path, agentic=True)

    chat.send("make notes")
    outcome = await chat.wait()

    assert (tmp_path / "notes.txt").read_text() == "hello"
    assert outcome.report is not None and outcome.report.succeeded == 1
    assert len(outcome.parse_errors) == 1
    assert sink.count(NotificationKind.DEBUG) == 1
    assert sink.count(NotificationKind.FILE_OPERATION) == 1
    assert chat.last_report is outcome.report
    assert backend.requests[0][0].content == ACTION_INSTRUCTIONS


@pytest.mark.asyncio
async def test_normal_mode_reply_is_not_executed(tmp_path: Path) -> None:
    backend = StubBackend(["```action\nwrite_file path=notes.txt content=hello\n```"])
    chat, sink, _ = make_orchestrator(backend, tmp_path)

    chat.send("make notes")
    outcome = await chat.wait()

    assert not (tmp_path / "notes.txt").exists()
    assert outcome.report is None
    assert sink.count(NotificationKind.FILE_OPERATION) == 0
    assert all(m.role != "system" for m in backend.requests[0])


@pytest.mark.asyncio
async def test_mode_is_checked_at_completion(tmp_path: Path) -> None:
    backend = StubBackend(["```action\nwrite_file path=late.txt content=x\n```"])
    backend.release.clear()
    chat, _, modes = make_orchestrator(backend, tmp_path, agentic=True)

    chat.send("go")
    modes.toggle_agentic(FocusTarget.CHAT)
    backend.release.set()
    await chat.wait()

    assert not (tmp_path / "late.txt").exists()


@pytest.mark.asyncio
async def test_close_closes_backend(tmp_path: Path) -> None:
    backend = StubBackend()
    chat, _, _ = make_orchestrator(backend, tmp_path)

    await chat.close()

    assert backend.closed


@pytest.mark.asyncio
async def test_empty_conversation_from_caller_is_kept(tmp_path: Path) -> None:
    sink = NotificationSink()
    modes = ModeController(sink)
    executor = ActionExecutor(SafetyPolicy.create(tmp_path), modes, sink)
    conversation = Conversation()

    orchestrator = ChatOrchestrator(StubBackend(["ok"]), modes, sink, executor, conversation)
    orchestrator.send("hello")
    await orchestrator.wait()

    assert orchestrator.conversation is conversation
    reply = conversation.last_assistant_message()
    assert reply is not None and reply.content == "ok"
