from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from agentide.core.notifications import (
    DEFAULT_CAPACITY,
    NotificationEntry,
    NotificationKind,
    NotificationSink,
)


def test_log_never_exceeds_capacity() -> None:
    sink = NotificationSink()

    for i in range(DEFAULT_CAPACITY * 3):
        sink.info(f"message {i}")
        assert len(sink) <= DEFAULT_CAPACITY

    messages = [entry.message for entry in sink.snapshot()]
    assert messages[0] == f"message {DEFAULT_CAPACITY * 2}"
    assert messages[-1] == f"message {DEFAULT_CAPACITY * 3 - 1}"


def test_snapshot_is_immutable_copy() -> None:
    sink = NotificationSink(capacity=3)
    sink.debug("first")

    snapshot = sink.snapshot()
    sink.debug("second")

    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 1


def test_clear_and_count() -> None:
    sink = NotificationSink()
    sink.append(NotificationKind.MOUSE_CLICK, "click")
    sink.info("info")
    sink.info("info again")

    assert sink.count(NotificationKind.INFO) == 2
    assert sink

    sink.clear()

    assert not sink
    assert sink.snapshot() == ()


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        NotificationSink(capacity=0)


def test_age_label() -> None:
    now = datetime(2024, 1, 1, 12, 0, 0)
    entry = NotificationEntry(NotificationKind.INFO, "x", timestamp=now)

    assert entry.age_label(now + timedelta(seconds=5)) == "5s"
    assert entry.age_label(now + timedelta(minutes=3)) == "3m"
    assert entry.age_label(now + timedelta(hours=2)) == "2h"
