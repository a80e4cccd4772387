from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from agentide.backends.base import BaseChatBackend, ChatMessage
from agentide.config.schema import AgentIdeConfig
from agentide.core.events import AppCommand, KeyPress, MouseClick, MouseMove, Resize
from agentide.core.focus import FocusTarget, PanelRegion
from agentide.core.modes import Mode
from agentide.core.notifications import NotificationKind
from agentide.core.state import AppState

FRAME = (
    PanelRegion(FocusTarget.FILE_EXPLORER, 0, 0, 30, 25),
    PanelRegion(FocusTarget.NOTIFICATIONS, 0, 25, 30, 15),
    PanelRegion(FocusTarget.EDITOR, 30, 0, 70, 28),
    PanelRegion(FocusTarget.CHAT, 30, 28, 70, 12),
)


class EchoBackend(BaseChatBackend):
    @property
    def name(self) -> str:
        return "echo"

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        return f"```action\nwrite_file path=echo.txt content={messages[-1].content}\n```"


@pytest.fixture
def state(tmp_path: Path) -> AppState:
    return AppState.from_config(AgentIdeConfig(), EchoBackend(), tmp_path)


def press(state: AppState, key: str) -> AppCommand | None:
    return state.handle_event(KeyPress(key))


def test_initial_snapshot(state: AppState, tmp_path: Path) -> None:
    snapshot = state.snapshot()

    assert snapshot.mode is Mode.NORMAL
    assert snapshot.focus is FocusTarget.EDITOR
    assert not snapshot.notifications_visible
    assert snapshot.project_root == tmp_path.resolve()
    assert snapshot.messages[0].role == "system"
    assert not snapshot.busy


def test_ctrl_a_toggles_agentic_and_shows_notifications(state: AppState) -> None:
    assert press(state, "ctrl+a") is AppCommand.TOGGLE_AGENTIC

    snapshot = state.snapshot()
    assert snapshot.mode is Mode.AGENTIC
    assert snapshot.notifications_visible
    assert snapshot.notifications[-1].message == "Mode: AGENTIC"


def test_insert_mode_turns_navigation_keys_into_text(state: AppState) -> None:
    assert press(state, "i") is AppCommand.ENTER_INSERT
    assert state.modes.mode is Mode.INSERT

    assert press(state, "tab") is None
    assert press(state, "i") is None
    assert state.focus.current is FocusTarget.EDITOR

    assert press(state, "escape") is AppCommand.CANCEL
    assert state.modes.mode is Mode.NORMAL


def test_i_outside_editor_is_not_consumed(state: AppState) -> None:
    press(state, "alt+3")

    assert press(state, "i") is None
    assert state.modes.mode is Mode.NORMAL


def test_tab_cycles_focus(state: AppState) -> None:
    assert press(state, "tab") is AppCommand.CYCLE_FOCUS
    assert state.focus.current is FocusTarget.CHAT


def test_ui_commands_are_returned(state: AppState) -> None:
    assert press(state, "ctrl+q") is AppCommand.QUIT
    assert press(state, "ctrl+s") is AppCommand.SAVE
    assert press(state, "ctrl+r") is AppCommand.REFRESH_TREE
    assert press(state, "x") is None


def test_click_uses_committed_frame(state: AppState) -> None:
    state.handle_event(KeyPress("ctrl+a"))
    state.commit_frame(FRAME)

    assert state.handle_event(MouseClick(5, 30)) is AppCommand.FOCUS_NOTIFICATIONS
    assert state.focus.current is FocusTarget.NOTIFICATIONS
    assert state.notifications.snapshot()[-1].kind is NotificationKind.MOUSE_CLICK


def test_resize_drops_stale_geometry(state: AppState) -> None:
    state.commit_frame(FRAME)
    state.handle_event(Resize(80, 24))

    assert state.handle_event(MouseClick(40, 5)) is None
    assert state.focus.current is FocusTarget.EDITOR


def test_clearing_notifications_repairs_focus(state: AppState) -> None:
    press(state, "ctrl+a")
    state.commit_frame(FRAME)
    state.handle_event(MouseClick(5, 30))

    assert press(state, "ctrl+k") is AppCommand.CLEAR_NOTIFICATIONS

    assert state.focus.current is FocusTarget.EDITOR
    entries = state.notifications.snapshot()
    assert len(entries) == 1
    assert entries[0].kind is NotificationKind.DEBUG


def test_mouse_move_never_changes_focus(state: AppState) -> None:
    state.commit_frame(FRAME)

    state.handle_event(MouseMove(40, 35))

    assert state.focus.current is FocusTarget.EDITOR


@pytest.mark.asyncio
async def test_chat_round_trip_in_agentic_mode(tmp_path: Path) -> None:
    state = AppState.from_config(AgentIdeConfig(), EchoBackend(), tmp_path)
    press(state, "ctrl+a")

    assert state.send_chat("hello") is True
    assert state.snapshot().busy
    await state.orchestrator.wait()

    assert (tmp_path / "echo.txt").read_text() == "hello"
    snapshot = state.snapshot()
    assert snapshot.last_report is not None
    assert snapshot.last_report.succeeded == 1
    assert not snapshot.busy


@pytest.mark.asyncio
async def test_ctrl_l_clears_chat(tmp_path: Path) -> None:
    state = AppState.from_config(AgentIdeConfig(), EchoBackend(), tmp_path)
    state.send_chat("hello")
    await state.orchestrator.wait()

    assert press(state, "ctrl+l") is AppCommand.CLEAR_CHAT

    assert [m.role for m in state.snapshot().messages] == ["system"]
