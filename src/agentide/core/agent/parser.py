"""Extract actions from free-form AI replies.

Only explicitly fenced blocks are actions. Two block flavours are accepted:

```action
write_file path=notes.txt content="hello world"
```

```action
write_file
path=src/app.py
content<<EOF
print("hi")
EOF
```

and, for models that prefer JSON, a ```json block holding an object with an
``"action"`` key or a list of such objects. JSON blocks without an
``"action"`` key are treated as ordinary code samples.

Parsing is best effort: a malformed block becomes a :class:`ParseError` and
the scan moves on to the next block. Nothing here touches the filesystem.
"""

from __future__ import annotations

import json
import re
import shlex
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Union

from agentide.core.agent.actions import (
    Action,
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

ACTION_INSTRUCTIONS = """\
You are a coding assistant embedded in a terminal IDE. When the user has
enabled agentic mode you may act on the project by emitting action blocks.
Each block is fenced with ```action and ``` and holds one action: the action
name, then key=value parameters (quote values with spaces, or use key<<EOF
... EOF for multi-line values). Paths are relative to the project root.

Available actions:
  read_file path=...
  write_file path=... content=...     (alias: create_file)
  replace_in_file path=... old=... new=...
  create_directory path=...
  delete_file path=...
  rename_file from=... to=...
  run_command command=... args="..."
  list_dir path=...
  file_info path=...
  search_text pattern=... root=...

Example:
```action
write_file path=notes.txt
content<<EOF
hello
EOF
```
Inside a key<<EOF value, ``` lines are literal text; only the EOF line ends
the value. Text outside action blocks is shown to the user as-is."""

_FENCE_RE = re.compile(r"^[ \t]*```[ \t]*(action|json)[ \t]*$", re.MULTILINE)
_CLOSE_RE = re.compile(r"^[ \t]*```[ \t]*$", re.MULTILINE)
_HEREDOC_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)<<([A-Za-z0-9_]+)\s*$")
_PARAM_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=(.*)$", re.DOTALL)

SNIPPET_CHARS = 60


class ActionSyntaxError(ValueError):
    """Raised internally for a block that cannot become an action."""


@dataclass(frozen=True)
class ParseError:
    """A malformed action block that was skipped."""

    offset: int
    message: str
    snippet: str = ""

    def __str__(self) -> str:
        return f"offset {self.offset}: {self.message}"


ParseItem = Union[Action, ParseError]


@dataclass
class ParseOutcome:
    """Actions and errors, each in textual order."""

    actions: list[Action] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    def in_order(self) -> list[ParseItem]:
        """Actions and errors merged back into source order."""
        items: list[ParseItem] = [*self.actions, *self.errors]
        return sorted(items, key=lambda item: item.offset)

    @property
    def empty(self) -> bool:
        return not self.actions and not self.errors


# --- Parameter mapping -----------------------------------------------------


def _require(params: dict[str, str], *names: str) -> str:
    for name in names:
        if name in params:
            return params[name]
    raise ActionSyntaxError(f"missing required parameter '{names[0]}'")


def _optional(params: dict[str, str], default: str, *names: str) -> str:
    for name in names:
        if name in params:
            return params[name]
    return default


def _split_args(raw: Any) -> tuple[str, ...]:
    if raw is None or raw == "":
        return ()
    if isinstance(raw, (list, tuple)):
        return tuple(str(item) for item in raw)
    try:
        return tuple(shlex.split(str(raw)))
    except ValueError as exc:
        raise ActionSyntaxError(f"bad args: {exc}") from exc


def _build_read(params: dict[str, Any]) -> Action:
    return ReadFile(path=_require(params, "path"))


def _build_write(params: dict[str, Any]) -> Action:
    return WriteFile(path=_require(params, "path"), content=_require(params, "content"))


def _build_create(params: dict[str, Any]) -> Action:
    return WriteFile(path=_require(params, "path"), content=_optional(params, "", "content"))


def _build_replace(params: dict[str, Any]) -> Action:
    old = _require(params, "old", "search", "find")
    if not old:
        raise ActionSyntaxError("'old' must not be empty")
    return ReplaceInFile(
        path=_require(params, "path"),
        old=old,
        new=_require(params, "new", "replace", "replacement"),
    )


def _build_mkdir(params: dict[str, Any]) -> Action:
    return CreateDirectory(path=_require(params, "path", "dir", "directory"))


def _build_info(params: dict[str, Any]) -> Action:
    return GetFileInfo(path=_require(params, "path"))


def _build_delete(params: dict[str, Any]) -> Action:
    return DeleteFile(path=_require(params, "path"))


def _build_rename(params: dict[str, Any]) -> Action:
    return RenameFile(
        source=_require(params, "from", "source", "src"),
        target=_require(params, "to", "target", "dest"),
    )


def _build_run(params: dict[str, Any]) -> Action:
    command = str(_require(params, "command", "cmd")).strip()
    if not command:
        raise ActionSyntaxError("empty command")
    return RunCommand(command=command, args=_split_args(params.get("args")))


def _build_list(params: dict[str, Any]) -> Action:
    return ListDir(path=_optional(params, ".", "path", "dir", "directory"))


def _build_search(params: dict[str, Any]) -> Action:
    return SearchText(
        pattern=_require(params, "pattern", "query"),
        root=_optional(params, ".", "root", "path", "directory"),
    )


BUILDERS: dict[str, Callable[[dict[str, Any]], Action]] = {
    "read_file": _build_read,
    "write_file": _build_write,
    "create_file": _build_create,
    "replace_in_file": _build_replace,
    "edit_file": _build_replace,
    "create_directory": _build_mkdir,
    "mkdir": _build_mkdir,
    "delete_file": _build_delete,
    "remove_file": _build_delete,
    "rename_file": _build_rename,
    "move_file": _build_rename,
    "run_command": _build_run,
    "execute": _build_run,
    "list_dir": _build_list,
    "list_directory": _build_list,
    "file_info": _build_info,
    "get_file_info": _build_info,
    "search_text": _build_search,
    "search": _build_search,
}


def build_action(name: str, params: dict[str, Any]) -> Action:
    builder = BUILDERS.get(name.strip().lower())
    if builder is None:
        raise ActionSyntaxError(f"unknown action '{name}'")
    return builder(params)


# --- Block scanning --------------------------------------------------------


def _closing_fence(text: str, start: int, heredocs: bool) -> tuple[int, int] | None:
    """Span of the fence that closes a block body starting at ``start``.

    With ``heredocs`` set, fences inside a ``key<<TAG`` value are skipped.
    If such a value is never closed, the first fence after it still ends the
    block so the body parser can report the open heredoc.
    """
    tag: str | None = None
    fallback: tuple[int, int] | None = None
    pos = start
    while pos < len(text):
        end = text.find("\n", pos)
        if end == -1:
            end = len(text)
        line = text[pos:end]
        if tag is not None:
            if line.strip() == tag:
                tag = None
                fallback = None
            elif fallback is None and _CLOSE_RE.fullmatch(line):
                fallback = (pos, end)
        elif _CLOSE_RE.fullmatch(line):
            return pos, end
        elif heredocs:
            heredoc = _HEREDOC_RE.match(line.strip())
            if heredoc:
                tag = heredoc.group(2)
        pos = end + 1
    return fallback


def _iter_blocks(text: str) -> Iterator[tuple[int, str, str | None]]:
    """Yield ``(offset, kind, body)`` per fenced block; body None if unterminated."""
    pos = 0
    while True:
        opening = _FENCE_RE.search(text, pos)
        if opening is None:
            return
        kind = opening.group(1)
        body_start = opening.end() + 1
        closing = _closing_fence(text, body_start, heredocs=kind == "action")
        if closing is None:
            yield opening.start(), kind, None
            return
        yield opening.start(), kind, text[body_start:closing[0]]
        pos = closing[1]


def _parse_action_body(body: str) -> Action:
    lines = body.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        raise ActionSyntaxError("empty action block")

    try:
        header = shlex.split(lines[0])
    except ValueError as exc:
        raise ActionSyntaxError(f"bad header: {exc}") from exc

    name, *tokens = header
    params: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or not key:
            raise ActionSyntaxError(f"expected key=value, got '{token}'")
        params[key] = value

    index = 1
    while index < len(lines):
        line = lines[index]
        index += 1
        if not line.strip():
            continue
        heredoc = _HEREDOC_RE.match(line.strip())
        if heredoc:
            key, tag = heredoc.groups()
            collected: list[str] = []
            while index < len(lines) and lines[index].strip() != tag:
                collected.append(lines[index])
                index += 1
            if index >= len(lines):
                raise ActionSyntaxError(f"heredoc '{tag}' for '{key}' is not closed")
            index += 1
            params[key] = "\n".join(collected)
            continue
        param = _PARAM_RE.match(line.strip())
        if param is None:
            raise ActionSyntaxError(f"expected key=value, got '{line.strip()}'")
        params[param.group(1)] = param.group(2)

    return build_action(name, params)


def _parse_json_body(body: str) -> list[Action] | None:
    """Return actions for a JSON action block, or None for plain JSON samples."""
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        if '"action"' in body:
            raise ActionSyntaxError(f"invalid JSON: {exc.msg}") from exc
        return None

    items = payload if isinstance(payload, list) else [payload]
    if not items or not all(isinstance(item, dict) and "action" in item for item in items):
        return None

    actions = []
    for item in items:
        params = {key: value for key, value in item.items() if key != "action"}
        for key, value in params.items():
            if key != "args" and not isinstance(value, str):
                params[key] = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
        actions.append(build_action(str(item["action"]), params))
    return actions


def _snippet(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) > SNIPPET_CHARS:
        return flat[:SNIPPET_CHARS] + "..."
    return flat


def parse_actions(text: str) -> ParseOutcome:
    """Scan an AI reply for action blocks."""
    outcome = ParseOutcome()
    for offset, kind, body in _iter_blocks(text):
        if body is None:
            outcome.errors.append(
                ParseError(offset, f"unterminated {kind} block", _snippet(text[offset:]))
            )
            continue
        try:
            if kind == "action":
                parsed: list[Action] | None = [_parse_action_body(body)]
            else:
                parsed = _parse_json_body(body)
        except ActionSyntaxError as exc:
            outcome.errors.append(ParseError(offset, str(exc), _snippet(body)))
            continue

        for action in parsed or []:
            action.offset = offset
            outcome.actions.append(action)
    return outcome
