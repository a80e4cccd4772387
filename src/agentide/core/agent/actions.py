"""Structured actions extracted from AI replies.

Each action type is its own dataclass. The parser creates them in
``PENDING`` state, the safety validator approves or denies them and the
executor attaches an :class:`ActionResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar


class ActionStatus(str, Enum):
    """Validation state of an action."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of executing an approved action."""

    ok: bool
    detail: str

    @classmethod
    def success(cls, detail: str) -> "ActionResult":
        return cls(ok=True, detail=detail)

    @classmethod
    def failure(cls, reason: str) -> "ActionResult":
        return cls(ok=False, detail=reason)


@dataclass
class Action:
    """Base class for all actions.

    ``status``, ``reason`` and ``result`` are bookkeeping filled in after
    parsing, so they stay out of the constructor.
    """

    name: ClassVar[str] = "action"
    mutates: ClassVar[bool] = False

    status: ActionStatus = field(default=ActionStatus.PENDING, init=False, compare=False)
    reason: str = field(default="", init=False, compare=False)
    result: ActionResult | None = field(default=None, init=False, compare=False)
    offset: int = field(default=-1, init=False, compare=False)

    def path_arguments(self) -> tuple[str, ...]:
        """Every path the action touches, as written by the model."""
        return ()

    def text_arguments(self) -> tuple[str, ...]:
        """Every string parameter the model supplied, paths included."""
        values: list[str] = []
        for item in fields(self):
            if not item.init:
                continue
            value = getattr(self, item.name)
            if isinstance(value, str):
                values.append(value)
            elif isinstance(value, tuple):
                values.extend(str(part) for part in value)
        return tuple(values)

    def describe(self) -> str:
        return self.name

    def approve(self) -> None:
        self.status = ActionStatus.APPROVED
        self.reason = ""

    def deny(self, reason: str) -> None:
        self.status = ActionStatus.DENIED
        self.reason = reason

    @property
    def succeeded(self) -> bool:
        return self.result is not None and self.result.ok


@dataclass
class ReadFile(Action):
    name: ClassVar[str] = "read_file"

    path: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"read {self.path}"


@dataclass
class WriteFile(Action):
    name: ClassVar[str] = "write_file"
    mutates: ClassVar[bool] = True

    path: str = ""
    content: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"write {self.path}"


@dataclass
class ReplaceInFile(Action):
    """Replace every occurrence of ``old`` with ``new`` in one file."""

    name: ClassVar[str] = "replace_in_file"
    mutates: ClassVar[bool] = True

    path: str = ""
    old: str = ""
    new: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"edit {self.path}"


@dataclass
class CreateDirectory(Action):
    name: ClassVar[str] = "create_directory"
    mutates: ClassVar[bool] = True

    path: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"create directory {self.path}"


@dataclass
class DeleteFile(Action):
    name: ClassVar[str] = "delete_file"
    mutates: ClassVar[bool] = True

    path: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"delete {self.path}"


@dataclass
class RenameFile(Action):
    name: ClassVar[str] = "rename_file"
    mutates: ClassVar[bool] = True

    source: str = ""
    target: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.source, self.target)

    def describe(self) -> str:
        return f"rename {self.source} -> {self.target}"


@dataclass
class RunCommand(Action):
    name: ClassVar[str] = "run_command"
    # Commands may touch anything in the tree.
    mutates: ClassVar[bool] = True

    command: str = ""
    args: tuple[str, ...] = ()

    @property
    def command_line(self) -> str:
        return " ".join((self.command, *self.args)).strip()

    def describe(self) -> str:
        return f"run {self.command_line}"


@dataclass
class ListDir(Action):
    name: ClassVar[str] = "list_dir"

    path: str = "."

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"list {self.path}"


@dataclass
class GetFileInfo(Action):
    name: ClassVar[str] = "file_info"

    path: str = ""

    def path_arguments(self) -> tuple[str, ...]:
        return (self.path,)

    def describe(self) -> str:
        return f"inspect {self.path}"


@dataclass
class SearchText(Action):
    name: ClassVar[str] = "search_text"

    pattern: str = ""
    root: str = "."

    def path_arguments(self) -> tuple[str, ...]:
        return (self.root,)

    def describe(self) -> str:
        return f"search '{self.pattern}' in {self.root}"


ACTION_TYPES: tuple[type[Action], ...] = (
    ReadFile,
    WriteFile,
    ReplaceInFile,
    CreateDirectory,
    DeleteFile,
    RenameFile,
    RunCommand,
    ListDir,
    GetFileInfo,
    SearchText,
)
