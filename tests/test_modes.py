from __future__ import annotations

import pytest

from agentide.core.focus import FocusTarget
from agentide.core.modes import Mode, ModeController
from agentide.core.notifications import NotificationKind, NotificationSink


@pytest.fixture
def controller() -> ModeController:
    return ModeController(NotificationSink())


@pytest.mark.parametrize("focus", list(FocusTarget))
def test_toggle_agentic_from_any_focus(focus: FocusTarget) -> None:
    sink = NotificationSink()
    modes = ModeController(sink)

    assert modes.toggle_agentic(focus) is True
    assert modes.mode is Mode.AGENTIC
    assert modes.is_agentic
    assert modes.toggle_agentic(focus) is True
    assert modes.mode is Mode.NORMAL
    assert [e.message for e in sink.snapshot()] == ["Mode: AGENTIC", "Mode: NORMAL"]
    assert sink.count(NotificationKind.INFO) == 2


def test_insert_only_from_editor(controller: ModeController) -> None:
    assert controller.enter_insert(FocusTarget.CHAT) is False
    assert controller.mode is Mode.NORMAL

    assert controller.enter_insert(FocusTarget.EDITOR) is True
    assert controller.mode is Mode.INSERT


def test_cancel_leaves_insert(controller: ModeController) -> None:
    controller.enter_insert(FocusTarget.EDITOR)

    assert controller.cancel(FocusTarget.EDITOR) is True
    assert controller.mode is Mode.NORMAL
    assert controller.cancel(FocusTarget.EDITOR) is False


def test_invalid_transitions_are_noops() -> None:
    sink = NotificationSink()
    modes = ModeController(sink)
    modes.enter_insert(FocusTarget.EDITOR)
    sink.clear()

    assert modes.toggle_agentic(FocusTarget.EDITOR) is False
    assert modes.mode is Mode.INSERT
    assert len(sink) == 0

    modes.cancel(FocusTarget.EDITOR)
    modes.toggle_agentic(FocusTarget.EDITOR)
    assert modes.enter_insert(FocusTarget.EDITOR) is False
    assert modes.cancel(FocusTarget.EDITOR) is False
    assert modes.mode is Mode.AGENTIC


def test_reset_returns_to_normal(controller: ModeController) -> None:
    controller.toggle_agentic(FocusTarget.CHAT)

    controller.reset()

    assert controller.mode is Mode.NORMAL
