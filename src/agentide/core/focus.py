"""Panel focus tracking and pointer hit-testing.

The layout pass measures every visible panel once per frame and commits the
result here with :meth:`FocusManager.commit_frame`. Hit-testing only ever
reads that committed geometry; nothing else in the application computes
panel rectangles on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from agentide.core.notifications import NotificationKind, NotificationSink

logger = logging.getLogger(__name__)


class FocusTarget(str, Enum):
    """Focusable panels, in cycle order."""

    FILE_EXPLORER = "file_explorer"
    EDITOR = "editor"
    CHAT = "chat"
    NOTIFICATIONS = "notifications"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    FocusTarget.FILE_EXPLORER: "File Explorer",
    FocusTarget.EDITOR: "Editor",
    FocusTarget.CHAT: "AI Chat",
    FocusTarget.NOTIFICATIONS: "Notifications",
}

CYCLE_ORDER: tuple[FocusTarget, ...] = tuple(FocusTarget)

# Evaluation order for pointer hits. Regions of one frame never overlap, so
# this only decides ties when geometry is inconsistent.
HIT_PRIORITY: tuple[FocusTarget, ...] = (
    FocusTarget.FILE_EXPLORER,
    FocusTarget.EDITOR,
    FocusTarget.NOTIFICATIONS,
    FocusTarget.CHAT,
)

# Where focus lands when the current target stops being visible.
FALLBACK_ORDER: tuple[FocusTarget, ...] = (
    FocusTarget.EDITOR,
    FocusTarget.FILE_EXPLORER,
    FocusTarget.CHAT,
)

DEFAULT_VISIBLE = frozenset(
    {FocusTarget.FILE_EXPLORER, FocusTarget.EDITOR, FocusTarget.CHAT}
)


@dataclass(frozen=True)
class PanelRegion:
    """Screen rectangle a panel occupied in the last rendered frame."""

    target: FocusTarget
    x: int
    y: int
    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return (
            self.x <= x < self.x + self.width
            and self.y <= y < self.y + self.height
        )


class FocusManager:
    """Holds the focused panel and the latest frame's panel regions."""

    def __init__(
        self,
        notifications: NotificationSink,
        initial: FocusTarget = FocusTarget.EDITOR,
        notify_hover: bool = False,
    ) -> None:
        self._notifications = notifications
        self._visible: frozenset[FocusTarget] = DEFAULT_VISIBLE
        self._regions: tuple[PanelRegion, ...] = ()
        self._current = initial if initial in self._visible else FALLBACK_ORDER[0]
        self._notify_hover = notify_hover
        self._hovered: FocusTarget | None = None

    @property
    def current(self) -> FocusTarget:
        return self._current

    @property
    def visible(self) -> frozenset[FocusTarget]:
        return self._visible

    @property
    def regions(self) -> tuple[PanelRegion, ...]:
        return self._regions

    def visible_cycle(self) -> list[FocusTarget]:
        return [target for target in CYCLE_ORDER if target in self._visible]

    def commit_frame(self, regions: Iterable[PanelRegion]) -> None:
        """Replace all panel geometry with the regions of a finished frame.

        The set of visible panels is taken from the same frame. An empty
        frame (nothing measured yet) keeps the previous visible set.
        """
        frame = tuple(regions)
        self._regions = frame
        if frame:
            self.set_visible(region.target for region in frame)

    def set_visible(self, targets: Iterable[FocusTarget]) -> None:
        visible = frozenset(targets)
        if not visible:
            logger.warning("Ignoring empty visible panel set")
            return
        self._visible = visible
        self.ensure_valid()

    def ensure_valid(self) -> bool:
        """Repair focus if it points at a hidden panel.

        Returns:
            True if focus had to be moved.
        """
        if self._current in self._visible:
            return False

        previous = self._current
        fallback = next(
            (target for target in FALLBACK_ORDER if target in self._visible),
            None,
        )
        if fallback is None:
            fallback = self.visible_cycle()[0]
        self._current = fallback
        logger.warning(
            "Focus %s not visible, reset to %s", previous.value, fallback.value
        )
        self._notifications.debug(
            f"Focus reset from {previous.label} to {fallback.label}"
        )
        return True

    def focus(self, target: FocusTarget) -> bool:
        """Focus a panel directly (keyboard shortcut). Hidden panels are refused."""
        if target not in self._visible:
            return False
        self._current = target
        return True

    def cycle(self) -> FocusTarget:
        """Advance to the next visible panel, wrapping around."""
        order = self.visible_cycle()
        if self._current in order:
            index = (order.index(self._current) + 1) % len(order)
        else:
            index = 0
        self._current = order[index]
        return self._current

    def region_at(self, x: int, y: int) -> PanelRegion | None:
        by_target = {region.target: region for region in self._regions}
        for target in HIT_PRIORITY:
            region = by_target.get(target)
            if region is not None and region.contains(x, y):
                return region
        return None

    def assign_by_point(self, x: int, y: int) -> FocusTarget | None:
        """Focus whichever panel contains the point.

        Returns:
            The newly focused target, or None when the point hits no panel
            (focus is left unchanged).
        """
        region = self.region_at(x, y)
        if region is None:
            return None

        self._current = region.target
        self._notifications.append(
            NotificationKind.MOUSE_CLICK,
            f"Clicked at ({x}, {y}) in {region.target.label}",
        )
        return region.target

    def hover(self, x: int, y: int) -> FocusTarget | None:
        """Track the panel under the pointer without changing focus."""
        region = self.region_at(x, y)
        hovered = region.target if region else None
        if hovered != self._hovered and hovered is not None and self._notify_hover:
            self._notifications.append(
                NotificationKind.MOUSE_HOVER,
                f"Mouse at ({x}, {y}) - {hovered.label}",
            )
        self._hovered = hovered
        return hovered
