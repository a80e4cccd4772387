"""Sequential executor for parsed agent actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from agentide.core.agent.actions import (
    Action,
    ActionResult,
    CreateDirectory,
    DeleteFile,
    GetFileInfo,
    ListDir,
    ReadFile,
    RenameFile,
    ReplaceInFile,
    RunCommand,
    SearchText,
    WriteFile,
)
from agentide.core.agent.effects import EffectError, Filesystem, ProcessLauncher
from agentide.core.agent.policy import SafetyPolicy, validate
from agentide.core.modes import ModeController
from agentide.core.notifications import NotificationKind, NotificationSink

logger = logging.getLogger(__name__)

REPORT_MAX_LINES = 10
AGENTIC_OFF_REASON = "agentic mode is off"


@dataclass
class BatchReport:
    """Outcome of one executed batch, in input order."""

    actions: list[Action] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.actions)

    @property
    def succeeded(self) -> int:
        return sum(1 for action in self.actions if action.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def tree_changed(self) -> bool:
        """True if any successful action may have changed the file tree."""
        return any(action.succeeded and action.mutates for action in self.actions)

    def summary(self) -> str:
        return f"{self.succeeded} of {self.total} actions succeeded"


class ActionExecutor:
    """Validates and performs actions one at a time.

    Effects only run while the mode controller reports AGENTIC mode and the
    validator approved the action. A failing action never stops the rest of
    the batch.
    """

    def __init__(
        self,
        policy: SafetyPolicy,
        modes: ModeController,
        notifications: NotificationSink,
        filesystem: Filesystem | None = None,
        launcher: ProcessLauncher | None = None,
    ) -> None:
        self.policy = policy
        self.modes = modes
        self.notifications = notifications
        self.filesystem = filesystem or Filesystem(Path(policy.project_root))
        self.launcher = launcher or ProcessLauncher()

    def execute(self, actions: Sequence[Action]) -> BatchReport:
        report = BatchReport()
        if not actions:
            return report

        for action in actions:
            self._execute_one(action)
            report.actions.append(action)

        self.notifications.info(report.summary())
        logger.info("Action batch finished: %s", report.summary())
        return report

    def _execute_one(self, action: Action) -> None:
        if not self.modes.is_agentic:
            self._deny(action, AGENTIC_OFF_REASON)
            return

        verdict = validate(action, self.policy)
        if not verdict.approved:
            self._deny(action, verdict.reason)
            return
        action.approve()

        try:
            detail = self._perform(action)
        except (EffectError, OSError, ValueError) as exc:
            action.result = ActionResult.failure(str(exc))
            logger.warning("Action %s failed: %s", action.describe(), exc)
            self._notify(f"Failed to {action.describe()}: {exc}")
            return

        action.result = ActionResult.success(detail)
        logger.info("Action %s succeeded", action.describe())
        description = action.describe()
        self._notify(f"{description[:1].upper()}{description[1:]} succeeded")

    def _deny(self, action: Action, reason: str) -> None:
        action.deny(reason)
        logger.info("Action %s denied: %s", action.describe(), reason)
        self._notify(f"Denied {action.describe()}: {reason}")

    def _notify(self, message: str) -> None:
        self.notifications.append(NotificationKind.FILE_OPERATION, message)

    def _resolve(self, path: str) -> Path:
        return Path(self.policy.canonicalize(path))

    def _perform(self, action: Action) -> str:
        fs = self.filesystem
        if isinstance(action, ReadFile):
            return fs.read(self._resolve(action.path))
        if isinstance(action, WriteFile):
            target = self._resolve(action.path)
            written = fs.write(target, action.content)
            return f"wrote {written} chars to {action.path}"
        if isinstance(action, ReplaceInFile):
            count = fs.replace(self._resolve(action.path), action.old, action.new)
            return f"replaced {count} occurrence(s) in {action.path}"
        if isinstance(action, CreateDirectory):
            fs.make_dir(self._resolve(action.path))
            return f"created directory {action.path}"
        if isinstance(action, DeleteFile):
            fs.delete(self._resolve(action.path))
            return f"deleted {action.path}"
        if isinstance(action, RenameFile):
            fs.rename(self._resolve(action.source), self._resolve(action.target))
            return f"renamed {action.source} to {action.target}"
        if isinstance(action, ListDir):
            return "\n".join(fs.list_dir(self._resolve(action.path)))
        if isinstance(action, GetFileInfo):
            return fs.info(self._resolve(action.path))
        if isinstance(action, SearchText):
            matches = fs.search(self._resolve(action.root), action.pattern)
            header = f"{len(matches)} matches for '{action.pattern}'"
            return "\n".join([header, *matches])
        if isinstance(action, RunCommand):
            result = self.launcher.run(
                action.command, action.args, Path(self.policy.project_root)
            )
            if not result.ok:
                raise EffectError(
                    f"exit code {result.exit_code}: {result.combined.strip()}"
                )
            return result.combined
        raise EffectError(f"unsupported action '{action.name}'")


def format_report(report: BatchReport, max_lines: int = REPORT_MAX_LINES) -> str:
    """Human-readable batch summary for the chat panel."""
    if not report.actions:
        return "No actions were executed."

    lines = ["Agent actions:"]
    for index, action in enumerate(report.actions, start=1):
        if action.succeeded:
            mark = "ok"
        elif action.result is None:
            mark = "denied"
        else:
            mark = "failed"
        lines.append(f"{index}. [{mark}] {action.describe()}")

        if action.result is None:
            lines.append(f"   Reason: {action.reason}")
            continue
        output = action.result.detail.splitlines()
        label = "Output" if action.result.ok else "Error"
        if output:
            lines.append(f"   {label}:")
            lines.extend(f"   {line}" for line in output[:max_lines])
            if len(output) > max_lines:
                lines.append("   ... (output truncated)")

    lines.append(report.summary())
    return "\n".join(lines)
