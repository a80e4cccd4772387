"""Safety policy for agent actions.

:func:`validate` is a pure function of ``(action, policy)``. Paths are
canonicalized lexically against the project root before any comparison, so
``..`` segments cannot walk out of the root unnoticed, and the verdict never
depends on what happens to exist on disk.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable

from agentide.core.agent.actions import Action, RunCommand

DEFAULT_RESTRICTED_PATHS: tuple[str, ...] = (
    "/etc",
    "/sys",
    "/proc",
    "/dev",
    "/boot",
    ".git",
)

DEFAULT_COMMAND_DENYLIST: tuple[str, ...] = (
    "rm -rf /",
    "sudo",
    "mkfs",
    "shutdown",
    "reboot",
    "dd if=",
    ":(){",
    "chmod -r 777 /",
    "> /dev/sd",
)


@dataclass(frozen=True)
class Verdict:
    """Validator decision for one action."""

    approved: bool
    reason: str = ""

    @classmethod
    def approve(cls) -> "Verdict":
        return cls(approved=True)

    @classmethod
    def deny(cls, reason: str) -> "Verdict":
        return cls(approved=False, reason=reason)


def _lexical_normalize(path: str) -> str:
    normalized = os.path.normpath(path)
    # normpath keeps a leading '//' as POSIX allows it; collapse it.
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


@dataclass(frozen=True)
class SafetyPolicy:
    """Immutable policy inputs for :func:`validate`.

    Attributes:
        project_root: Absolute root every path must stay inside.
        restricted_prefixes: Absolute prefixes, or prefixes relative to the
            project root (such as ``.git``), that are always off limits.
        command_denylist: Case-insensitive substrings that block a command.
        allow_commands: Whether ``run_command`` is permitted at all.
    """

    project_root: PurePosixPath
    restricted_prefixes: tuple[PurePosixPath, ...] = ()
    command_denylist: tuple[str, ...] = ()
    allow_commands: bool = False
    _denylist_folded: tuple[str, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        root = str(self.project_root)
        if not os.path.isabs(root):
            raise ValueError(f"project root must be absolute: {root}")
        canonical_root = PurePosixPath(_lexical_normalize(root))
        object.__setattr__(self, "project_root", canonical_root)
        object.__setattr__(
            self,
            "restricted_prefixes",
            tuple(self._anchor(prefix) for prefix in self.restricted_prefixes),
        )
        object.__setattr__(
            self,
            "_denylist_folded",
            tuple(item.casefold() for item in self.command_denylist if item),
        )

    @classmethod
    def create(
        cls,
        project_root: str | Path,
        restricted: Iterable[str | Path] = DEFAULT_RESTRICTED_PATHS,
        denylist: Iterable[str] = DEFAULT_COMMAND_DENYLIST,
        allow_commands: bool = False,
    ) -> "SafetyPolicy":
        """Build a policy, resolving the root once (symlinks included)."""
        root = Path(project_root).expanduser().resolve()
        return cls(
            project_root=PurePosixPath(root.as_posix()),
            restricted_prefixes=tuple(PurePosixPath(str(item)) for item in restricted),
            command_denylist=tuple(denylist),
            allow_commands=allow_commands,
        )

    def _anchor(self, prefix: PurePosixPath | str) -> PurePosixPath:
        raw = str(prefix)
        if not os.path.isabs(raw):
            raw = os.path.join(str(self.project_root), raw)
        return PurePosixPath(_lexical_normalize(raw))

    def canonicalize(self, path: str) -> PurePosixPath:
        """Absolute, ``.``/``..``-free form of ``path`` relative to the root."""
        raw = path.strip() or "."
        if not os.path.isabs(raw):
            raw = os.path.join(str(self.project_root), raw)
        return PurePosixPath(_lexical_normalize(raw))

    def is_restricted(self, canonical: PurePosixPath) -> PurePosixPath | None:
        for prefix in self.restricted_prefixes:
            if canonical == prefix or canonical.is_relative_to(prefix):
                return prefix
        return None

    def denied_substring(self, text: str) -> str | None:
        folded = text.casefold()
        for item in self._denylist_folded:
            if item in folded:
                return item
        return None


def check_path(path: str, policy: SafetyPolicy) -> str | None:
    """Return a denial reason for ``path``, or None if it is allowed."""
    canonical = policy.canonicalize(path)
    root = policy.project_root
    if canonical != root and not canonical.is_relative_to(root):
        return f"path '{path}' resolves to {canonical}, outside project root {root}"
    prefix = policy.is_restricted(canonical)
    if prefix is not None:
        return f"path '{path}' is inside restricted location {prefix}"
    return None


def check_text(value: str) -> str | None:
    """Return a denial reason if ``value`` cannot reach the OS intact."""
    if "\x00" in value:
        return "parameter contains a NUL character"
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return "parameter is not valid UTF-8 text"
    return None


def validate(action: Action, policy: SafetyPolicy) -> Verdict:
    """Approve or deny a single action. Pure and deterministic."""
    for value in action.text_arguments():
        reason = check_text(value)
        if reason is not None:
            return Verdict.deny(f"{action.name}: {reason}")

    if isinstance(action, RunCommand):
        if not policy.allow_commands:
            return Verdict.deny("running commands is disabled by policy")
        hit = policy.denied_substring(action.command_line)
        if hit is not None:
            return Verdict.deny(f"command contains blocked text '{hit}'")

    for path in action.path_arguments():
        if not path or not path.strip():
            return Verdict.deny(f"{action.name} needs a non-empty path")
        reason = check_path(path, policy)
        if reason is not None:
            return Verdict.deny(reason)
        if action.mutates and policy.canonicalize(path) == policy.project_root:
            return Verdict.deny(f"{action.name} may not target the project root itself")

    return Verdict.approve()
