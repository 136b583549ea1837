"""Detection of trusted "skills" script executions.

A command that runs a regular file living under one of the configured skills
directories bypasses allowlist matching. Both direct execution
(``./skills/x/run.sh``) and execution through a known interpreter
(``python3 skills/x/tool.py``) are recognized.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from typing import Protocol

from shellgate.bash.parser import ParsedCommand
from shellgate.permissions.paths import (
    AbsFilePath,
    expand_tilde,
    is_directory_stack_reference,
    is_within,
    resolve_file_path,
)

logger = logging.getLogger(__name__)


class FileChecker(Protocol):
    def is_regular_file(self, path: AbsFilePath) -> bool: ...


class LocalFileChecker:
    """Checks the local filesystem with a single stat call."""

    def is_regular_file(self, path: AbsFilePath) -> bool:
        return os.path.isfile(path)


SCRIPT_RUNNERS: dict[str, re.Pattern[str]] = {
    "bash": re.compile(r"(?:ba)?sh"),
    "zsh": re.compile(r"zsh"),
    "python": re.compile(r"python[23]?"),
    "node": re.compile(r"node|nodejs"),
    "npx": re.compile(r"npx"),
    "pkgx": re.compile(r"pkgx"),
}

_INTERPRETERS = ("bash", "zsh", "python", "node")


def _runs_with(name: str, executable: str) -> bool:
    return SCRIPT_RUNNERS[name].fullmatch(executable) is not None


def _is_interpreter(executable: str) -> bool:
    return any(_runs_with(name, executable) for name in _INTERPRETERS)


def find_skills_script(command: ParsedCommand) -> str | None:
    """Return the script path a command would execute, or ``None``.

    Only the first script argument of a recognized runner counts; options
    placed before the script (``python -u x.py``) are not looked through.
    """
    executable, args = command.executable, command.args

    if "/" in executable:
        return executable
    if _is_interpreter(executable):
        return args[0] if args else None
    if _runs_with("npx", executable):
        if len(args) >= 2 and args[0] == "tsx":
            return args[1]
        return None
    if _runs_with("pkgx", executable):
        if len(args) >= 2 and (args[0] == "tsx" or _is_interpreter(args[0])):
            return args[1]
        return None
    return None


def is_within_skills_dir(
    script_path: AbsFilePath,
    skills_paths: Sequence[str],
    project_cwd: AbsFilePath | str,
    *,
    home_dir: str | None = None,
) -> bool:
    real_script = os.path.realpath(script_path)
    for skills_path in skills_paths:
        skills_dir = resolve_file_path(project_cwd, expand_tilde(skills_path, home_dir))
        real_dir = os.path.realpath(skills_dir)
        # the directory itself is not a script inside it
        if real_script != real_dir and is_within(real_dir, real_script):
            return True
    return False


def is_skills_script_execution(
    command: ParsedCommand,
    skills_paths: Sequence[str],
    current_cwd: AbsFilePath | str,
    project_cwd: AbsFilePath | str,
    file_checker: FileChecker,
    *,
    home_dir: str | None = None,
) -> bool:
    if not skills_paths:
        return False

    script = find_skills_script(command)
    if script is None or is_directory_stack_reference(script):
        return False

    script_path = resolve_file_path(current_cwd, expand_tilde(script, home_dir))
    if not file_checker.is_regular_file(script_path):
        return False
    if not is_within_skills_dir(script_path, skills_paths, project_cwd, home_dir=home_dir):
        return False

    logger.debug(f"Allowing skills script execution: {command.display()}")
    return True


__all__ = [
    "FileChecker",
    "LocalFileChecker",
    "SCRIPT_RUNNERS",
    "find_skills_script",
    "is_skills_script_execution",
    "is_within_skills_dir",
]
