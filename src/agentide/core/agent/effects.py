"""Filesystem and process collaborators used by the action executor.

Both classes receive absolute, already validated paths. They raise
``OSError`` or :class:`EffectError` on failure and never decide policy.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Sequence

logger = logging.getLogger(__name__)

READ_LIMIT_CHARS = 100_000
MAX_SEARCH_MATCHES = 200
SKIP_DIRS = {".git", "node_modules", "__pycache__", ".venv", "venv", "target"}


class EffectError(Exception):
    """A filesystem or process effect could not be carried out."""


def is_probably_text(path: Path) -> bool:
    """Heuristic to see if file can be treated as text."""
    if not path.is_file():
        return False

    try:
        with open(path, "rb") as f:
            chunk = f.read(8192)
    except OSError:
        return False

    if b"\x00" in chunk:
        return False

    try:
        chunk.decode("utf-8")
    except UnicodeDecodeError:
        return False

    return True


def read_text_file(path: Path, limit: int = READ_LIMIT_CHARS) -> str:
    """Read a text file with a size cap."""
    content = path.read_text(encoding="utf-8", errors="replace")
    if len(content) > limit:
        return content[:limit] + "\n\n... [truncated]"
    return content


class Filesystem:
    """Local filesystem effects.

    When ``root`` is given, mutating operations refuse paths that only
    stay inside it lexically and leave it once symlinks are followed.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root.resolve() if root is not None else None

    def _guard(self, path: Path, follow: bool = True) -> None:
        if self.root is None:
            return
        real = path.resolve() if follow else path.parent.resolve() / path.name
        if real != self.root and not real.is_relative_to(self.root):
            raise EffectError(f"{path} leads outside the project root via a symlink ({real})")

    def read(self, path: Path) -> str:
        if not path.is_file():
            raise EffectError(f"file not found: {path}")
        return read_text_file(path)

    def write(self, path: Path, content: str) -> int:
        if path.is_dir():
            raise EffectError(f"is a directory: {path}")
        self._guard(path)
        data = content.encode("utf-8")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return len(content)

    def replace(self, path: Path, old: str, new: str) -> int:
        """Replace every occurrence of ``old``; returns how many were replaced."""
        if not old:
            raise EffectError("text to replace must not be empty")
        if not path.is_file():
            raise EffectError(f"file not found: {path}")
        self._guard(path)
        content = path.read_text(encoding="utf-8")
        count = content.count(old)
        if count == 0:
            raise EffectError(f"text not found in {path}")
        path.write_bytes(content.replace(old, new).encode("utf-8"))
        return count

    def make_dir(self, path: Path) -> None:
        if path.exists() and not path.is_dir():
            raise EffectError(f"not a directory: {path}")
        self._guard(path)
        path.mkdir(parents=True, exist_ok=True)

    def delete(self, path: Path) -> None:
        self._guard(path, follow=False)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            raise EffectError(f"path does not exist: {path}")

    def rename(self, source: Path, target: Path) -> None:
        if not source.exists():
            raise EffectError(f"path does not exist: {source}")
        if target.exists():
            raise EffectError(f"target already exists: {target}")
        self._guard(source, follow=False)
        self._guard(target, follow=False)
        target.parent.mkdir(parents=True, exist_ok=True)
        source.rename(target)

    def info(self, path: Path) -> str:
        if not path.exists():
            raise EffectError(f"path does not exist: {path}")
        stat = path.stat()
        if path.is_dir():
            kind, size = "Directory", "N/A"
        elif path.is_file():
            kind, size = "File", f"{stat.st_size} bytes"
        else:
            kind, size = "Other", "N/A"
        modified = datetime.fromtimestamp(stat.st_mtime).isoformat(timespec="seconds")
        return "\n".join(
            [
                f"Path: {path}",
                f"Type: {kind}",
                f"Size: {size}",
                f"Modified: {modified}",
                f"Readonly: {not os.access(path, os.W_OK)}",
            ]
        )

    def list_dir(self, path: Path) -> list[str]:
        if not path.is_dir():
            raise EffectError(f"not a directory: {path}")
        items = []
        for entry in path.iterdir():
            kind = "DIR" if entry.is_dir() else "FILE"
            items.append(f"{kind:<6} {entry.name}")
        return sorted(items)

    def search(self, root: Path, pattern: str) -> list[str]:
        """Find lines matching ``pattern`` (regex, or literal if invalid)."""
        if not root.exists():
            raise EffectError(f"path does not exist: {root}")
        try:
            matcher = re.compile(pattern)
        except re.error:
            matcher = re.compile(re.escape(pattern))

        matches: list[str] = []
        for file_path in self._walk_files(root):
            if not is_probably_text(file_path):
                continue
            try:
                lines = file_path.read_text(encoding="utf-8", errors="replace").splitlines()
            except OSError as exc:
                logger.debug("Skipping unreadable %s: %s", file_path, exc)
                continue
            for number, line in enumerate(lines, start=1):
                if matcher.search(line):
                    rel = file_path.relative_to(root) if root.is_dir() else file_path.name
                    matches.append(f"{rel}:{number}: {line.strip()}")
                    if len(matches) >= MAX_SEARCH_MATCHES:
                        return matches
        return matches

    @staticmethod
    def _walk_files(root: Path) -> Iterator[Path]:
        if root.is_file():
            yield root
            return
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for name in sorted(filenames):
                yield Path(dirpath) / name


@dataclass
class ProcessResult:
    """Result of running a command."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def combined(self) -> str:
        if not self.stderr:
            return self.stdout
        return f"STDOUT:\n{self.stdout}\n\nSTDERR:\n{self.stderr}"


class ProcessLauncher:
    """Runs commands synchronously with a timeout."""

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    def run(self, command: str, args: Sequence[str], cwd: Path) -> ProcessResult:
        """Run ``command`` through the shell when it has no separate args."""
        if args:
            argv: str | list[str] = [command, *args]
            shell = False
        else:
            argv = command
            shell = True
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                shell=shell,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise EffectError(f"command timed out after {self.timeout:g}s") from exc
        except OSError as exc:
            raise EffectError(f"failed to start command: {exc}") from exc

        return ProcessResult(
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
