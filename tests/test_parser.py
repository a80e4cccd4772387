from __future__ import annotations

from agentide.core.agent.actions import (
    ActionStatus,
    CreateDirectory,
    GetFileInfo,
    ListDir,
    RenameFile,
    ReplaceInFile,
    RunCommand,
    SearchText,
    WriteFile,
)
from agentide.core.agent.parser import ParseError, parse_actions


def test_plain_prose_yields_nothing() -> None:
    outcome = parse_actions("Sure, here is how you would do it. No actions needed.")

    assert outcome.empty


def test_single_line_write_block() -> None:
    reply = "Creating it now.\n```action\nwrite_file path=notes.txt content=hello\n```\nDone."

    outcome = parse_actions(reply)

    assert outcome.errors == []
    assert outcome.actions == [WriteFile(path="notes.txt", content="hello")]
    assert outcome.actions[0].status is ActionStatus.PENDING


def test_good_block_and_malformed_block_keep_order() -> None:
    reply = (
        "```action\n"
        "write_file path=a.txt content=one\n"
        "```\n"
        "and then\n"
        "```action\n"
        "write_file\n"
        "```\n"
    )

    outcome = parse_actions(reply)

    assert len(outcome.actions) == 1
    assert len(outcome.errors) == 1
    items = outcome.in_order()
    assert isinstance(items[0], WriteFile)
    assert isinstance(items[1], ParseError)
    assert "path" in items[1].message


def test_malformed_block_first_then_good_block() -> None:
    reply = (
        "```action\n"
        "explode_everything now=1\n"
        "```\n"
        "```action\n"
        "list_dir path=src\n"
        "```\n"
    )

    items = parse_actions(reply).in_order()

    assert isinstance(items[0], ParseError)
    assert "unknown action" in items[0].message
    assert items[1] == ListDir(path="src")


def test_heredoc_content_keeps_newlines() -> None:
    reply = (
        "```action\n"
        "write_file\n"
        "path=src/app.py\n"
        "content<<EOF\n"
        "def main():\n"
        "    print(\"hi\")\n"
        "EOF\n"
        "```\n"
    )

    outcome = parse_actions(reply)

    assert outcome.actions == [
        WriteFile(path="src/app.py", content='def main():\n    print("hi")')
    ]


def test_unclosed_heredoc_is_an_error() -> None:
    reply = "```action\nwrite_file path=a.txt\ncontent<<EOF\nnever closed\n```\n"

    outcome = parse_actions(reply)

    assert outcome.actions == []
    assert "not closed" in outcome.errors[0].message


def test_unterminated_block_is_an_error() -> None:
    outcome = parse_actions("```action\nread_file path=a.txt\n")

    assert outcome.actions == []
    assert len(outcome.errors) == 1
    assert "unterminated" in outcome.errors[0].message


def test_quoted_values_and_aliases() -> None:
    reply = (
        "```action\n"
        'move_file from="old name.txt" to=new.txt\n'
        "```\n"
        "```action\n"
        'run_command command=pytest args="-q tests/test_parser.py"\n'
        "```\n"
        "```action\n"
        "search query=TODO path=src\n"
        "```\n"
    )

    outcome = parse_actions(reply)

    assert outcome.errors == []
    assert outcome.actions == [
        RenameFile(source="old name.txt", target="new.txt"),
        RunCommand(command="pytest", args=("-q", "tests/test_parser.py")),
        SearchText(pattern="TODO", root="src"),
    ]


def test_json_action_blocks_are_parsed() -> None:
    reply = (
        "```json\n"
        '[{"action": "create_file", "path": "a.txt"},'
        ' {"action": "run_command", "command": "ls", "args": ["-l"]}]\n'
        "```\n"
    )

    outcome = parse_actions(reply)

    assert outcome.errors == []
    assert outcome.actions == [
        WriteFile(path="a.txt", content=""),
        RunCommand(command="ls", args=("-l",)),
    ]


def test_json_without_action_key_is_just_a_sample() -> None:
    reply = '```json\n{"name": "demo", "version": 1}\n```\n'

    assert parse_actions(reply).empty


def test_broken_json_action_is_an_error() -> None:
    reply = '```json\n{"action": "read_file", "path": \n```\n'

    outcome = parse_actions(reply)

    assert outcome.actions == []
    assert "invalid JSON" in outcome.errors[0].message


def test_other_code_fences_are_ignored() -> None:
    reply = "```python\nprint('write_file path=x')\n```\n"

    assert parse_actions(reply).empty


def test_heredoc_may_contain_code_fences() -> None:
    reply = (
        "```action\n"
        "write_file path=README.md\n"
        "content<<EOF\n"
        "# Usage\n"
        "```\n"
        "pip install .\n"
        "```\n"
        "EOF\n"
        "```\n"
        "```action\n"
        "list_dir path=.\n"
        "```\n"
    )

    outcome = parse_actions(reply)

    assert outcome.errors == []
    assert outcome.actions == [
        WriteFile(path="README.md", content="# Usage\n```\npip install .\n```"),
        ListDir(path="."),
    ]


def test_replace_mkdir_and_info_blocks() -> None:
    reply = (
        "```action\n"
        "replace_in_file path=app.py\n"
        "old<<OLD\n"
        "x = 1\n"
        "OLD\n"
        "new=\n"
        "```\n"
        "```json\n"
        '[{"action": "mkdir", "path": "build"}, {"action": "file_info", "path": "app.py"}]\n'
        "```\n"
    )

    outcome = parse_actions(reply)

    assert outcome.errors == []
    assert outcome.actions == [
        ReplaceInFile(path="app.py", old="x = 1", new=""),
        CreateDirectory(path="build"),
        GetFileInfo(path="app.py"),
    ]


def test_replace_requires_non_empty_old_text() -> None:
    outcome = parse_actions("```action\nreplace_in_file path=a.py old= new=x\n```")

    assert outcome.actions == []
    assert "'old' must not be empty" in outcome.errors[0].message
