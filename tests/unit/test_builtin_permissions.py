from __future__ import annotations

from pathlib import Path

import pytest

from shellgate.permissions.builtin import BUILTIN_COMMAND_PERMISSIONS
from shellgate.permissions.engine import is_command_allowed_by_config
from shellgate.permissions.spec import CommandSpec


def _allowed(command: str, project: Path) -> bool:
    return is_command_allowed_by_config(command, BUILTIN_COMMAND_PERMISSIONS, cwd=project).allowed


def test_builtins_are_read_only_mapping() -> None:
    assert all(isinstance(spec, CommandSpec) for spec in BUILTIN_COMMAND_PERMISSIONS.values())
    with pytest.raises(TypeError):
        BUILTIN_COMMAND_PERMISSIONS["rm"] = CommandSpec(allow_all=True)  # type: ignore[index]


@pytest.mark.parametrize(
    "command",
    [
        "ls -la",
        "pwd",
        "echo hello world",
        "cat file.txt",
        "head -n 20 file.txt",
        "head -20 file.txt",
        "tail -50 subdir/nested.txt",
        "wc -l file.txt",
        "grep -i todo file.txt subdir/nested.txt",
        "grep todo",
        "sort file.txt",
        "uniq",
        "cut -d , -f 1 file.txt",
        "rg -l TODO --type py subdir",
        "fd -t f -e py pattern subdir",
        "fd",
        "git status --short",
        "git log --oneline -n 5",
        "git diff --cached file.txt",
        "git show --stat",
        "git branch",
        "cat file.txt | grep test | sort | uniq | wc -l",
        "git diff 2>&1 | head -n 100",
    ],
)
def test_read_only_commands_are_allowed(project: Path, command: str) -> None:
    assert _allowed(command, project)


@pytest.mark.parametrize(
    "command",
    [
        "cat /etc/passwd",
        "cat .hidden/secret.txt",
        "rm -rf .",
        "git push origin main",
        "git branch -D main",
        "git diff --output=/tmp/x",
        "git log -p --output=x",
        "sort --compress-program=rm file.txt",
        "sort -o file.txt",
        "rg --pre rm pattern",
        "rg -e pattern",
        "fd --exec-batch=rm",
        "fd -x rm",
        "grep pattern --file=/etc/passwd",
        "awk '{system(\"id\")}' file.txt",
        "sed -n 1p file.txt",
        "xargs rm",
        "echo hi > /etc/motd",
        "head -n /etc/passwd",
    ],
)
def test_dangerous_commands_are_denied(project: Path, command: str) -> None:
    assert not _allowed(command, project)
