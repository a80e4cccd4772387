"""Agentic action pipeline: parse, validate, execute."""

from agentide.core.agent.actions import (
    Action,
    ActionResult,
    ActionStatus,
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
from agentide.core.agent.effects import EffectError, Filesystem, ProcessLauncher, ProcessResult
from agentide.core.agent.executor import ActionExecutor, BatchReport, format_report
from agentide.core.agent.parser import ACTION_INSTRUCTIONS, ParseError, ParseOutcome, parse_actions
from agentide.core.agent.policy import SafetyPolicy, Verdict, validate

__all__ = [
    "ACTION_INSTRUCTIONS",
    "Action",
    "ActionExecutor",
    "ActionResult",
    "ActionStatus",
    "BatchReport",
    "CreateDirectory",
    "DeleteFile",
    "EffectError",
    "Filesystem",
    "GetFileInfo",
    "ListDir",
    "ParseError",
    "ParseOutcome",
    "ProcessLauncher",
    "ProcessResult",
    "ReadFile",
    "RenameFile",
    "ReplaceInFile",
    "RunCommand",
    "SafetyPolicy",
    "SearchText",
    "Verdict",
    "WriteFile",
    "format_report",
    "parse_actions",
    "validate",
]
