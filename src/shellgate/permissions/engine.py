"""Allow/deny decisions for parsed shell command lists.

Commands are checked left to right against a simulated working directory.
``cd`` moves that directory for later commands, trusted skills scripts pass
without matching, and every other command must match its allowlist entry.
A single denied command denies the whole list, whatever operators join it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from shellgate.bash.lexer import ShellSyntaxError
from shellgate.bash.parser import ParsedCommand, ParsedCommandList, parse
from shellgate.permissions.gitignore import Gitignore, NullGitignore
from shellgate.permissions.matcher import (
    MatchContext,
    MatchFailure,
    PatternStructureError,
    match_args_pattern,
    more_specific,
)
from shellgate.permissions.paths import (
    AbsFilePath,
    expand_tilde,
    home_directory,
    is_directory_stack_reference,
    is_path_safe,
    resolve_file_path,
)
from shellgate.permissions.skills import (
    FileChecker,
    LocalFileChecker,
    is_skills_script_execution,
)
from shellgate.permissions.spec import CommandSpec, load_command_spec

logger = logging.getLogger(__name__)

NULL_DEVICE = "/dev/null"

PermissionConfig = Mapping[str, CommandSpec | Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class PermissionCheckResult:
    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "PermissionCheckResult":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "PermissionCheckResult":
        return cls(allowed=False, reason=reason)


def process_cd_command(
    command: ParsedCommand,
    current_cwd: AbsFilePath,
    *,
    home_dir: str | None = None,
) -> AbsFilePath | None:
    """Return the directory a ``cd`` moves to, or ``None`` for other commands."""
    if command.executable != "cd":
        return None
    if not command.args:
        return AbsFilePath(home_dir) if home_dir is not None else home_directory()
    return resolve_file_path(current_cwd, expand_tilde(command.args[0], home_dir))


def check_cd_command(command: ParsedCommand) -> PermissionCheckResult:
    """Deny ``cd`` forms whose destination the simulated cwd cannot follow.

    Options (``-P``, ``-L``), ``cd -`` and directory stack references depend on
    shell state, so only a bare ``cd`` or a single plain directory is accepted.
    """
    if len(command.args) > 1:
        return PermissionCheckResult.deny("cd accepts at most one directory argument")
    if command.args:
        target = command.args[0]
        if target.startswith("-"):
            return PermissionCheckResult.deny(f'cd argument "{target}" is not supported')
        if is_directory_stack_reference(target):
            return PermissionCheckResult.deny(
                f'cd target "{target}" refers to the shell directory stack'
            )
    return PermissionCheckResult.allow()


def check_redirects(command: ParsedCommand, ctx: MatchContext) -> PermissionCheckResult:
    for redirect in command.file_redirects:
        if redirect.target == NULL_DEVICE:
            continue
        check = is_path_safe(
            redirect.target,
            ctx.current_cwd,
            ctx.project_cwd,
            ctx.gitignore,
            home_dir=ctx.home_dir,
        )
        if not check.safe:
            return PermissionCheckResult.deny(f"{redirect.direction} redirect: {check.reason}")
    return PermissionCheckResult.allow()


def check_command(
    executable: str,
    args: Sequence[str],
    config: PermissionConfig,
    ctx: MatchContext,
) -> PermissionCheckResult:
    """Match one command against its allowlist entry.

    Subcommands are descended greedily; at the final node ``allow_all``
    accepts everything, otherwise the first fully matching ``args`` pattern
    wins. When every pattern fails the most specific failure is reported.
    """
    raw_spec = config.get(executable)
    if raw_spec is None:
        return PermissionCheckResult.deny(f'"{executable}" is not in the allowlist')
    try:
        node = load_command_spec(raw_spec)
    except ValidationError as exc:
        logger.warning(f"Invalid permission configuration for {executable!r}: {exc}")
        return PermissionCheckResult.deny(
            f'invalid permission configuration for "{executable}": {exc}'
        )

    consumed = [executable]
    index = 0
    while node.sub_commands and index < len(args) and args[index] in node.sub_commands:
        node = node.sub_commands[args[index]]
        consumed.append(args[index])
        index += 1
    remaining = list(args[index:])
    node_name = " ".join(consumed)

    if node.allow_all:
        return PermissionCheckResult.allow()

    if node.args is None:
        if not remaining:
            return PermissionCheckResult.allow()
        if node.sub_commands:
            return PermissionCheckResult.deny(
                f'subcommand "{remaining[0]}" is not in the allowlist for "{node_name}"'
            )
        return PermissionCheckResult.deny(f"unexpected arguments: {' '.join(remaining)}")

    best: MatchFailure | None = None
    for pattern in node.args:
        try:
            result = match_args_pattern(remaining, pattern, ctx)
        except PatternStructureError as exc:
            logger.warning(f"Invalid argument pattern for {node_name!r}: {exc}")
            return PermissionCheckResult.deny(f"invalid permission configuration: {exc}")
        if result.matched:
            return PermissionCheckResult.allow()
        if result.failure is not None and more_specific(result.failure, best):
            best = result.failure

    if best is None:
        return PermissionCheckResult.deny(f'no argument patterns allowed for "{node_name}"')
    return PermissionCheckResult.deny(best.reason)


def check_command_list_permissions(
    command_list: ParsedCommandList | Sequence[ParsedCommand],
    config: PermissionConfig,
    *,
    cwd: AbsFilePath | Path | str,
    gitignore: Gitignore | None = None,
    skills_paths: Sequence[str] | None = None,
    file_checker: FileChecker | None = None,
    home_dir: str | None = None,
) -> PermissionCheckResult:
    """Check every command of ``command_list``; the first denial decides.

    Args:
        command_list: Parsed commands in execution order.
        config: Allowlist keyed by executable, as models or plain mappings.
        cwd: Project root; also the starting working directory.
        gitignore: Matcher for project-relative paths, nothing ignored if omitted.
        skills_paths: Directories whose scripts may run without matching.
        file_checker: Regular-file probe used for skills detection.
        home_dir: Override for ``~`` and bare ``cd``.

    Returns:
        PermissionCheckResult; denials name the offending command.
    """
    project_cwd = AbsFilePath(os.path.abspath(os.fspath(cwd)))
    current_cwd = project_cwd
    ignore = gitignore if gitignore is not None else NullGitignore()
    checker = file_checker if file_checker is not None else LocalFileChecker()
    skills = list(skills_paths or ())

    for command in command_list:
        ctx = MatchContext(
            current_cwd=current_cwd,
            project_cwd=project_cwd,
            gitignore=ignore,
            home_dir=home_dir,
        )

        result = check_redirects(command, ctx)
        if result.allowed and command.executable == "cd":
            result = check_cd_command(command)
        if result.allowed:
            new_cwd = process_cd_command(command, current_cwd, home_dir=home_dir)
            if new_cwd is not None:
                current_cwd = new_cwd
                continue
            if is_skills_script_execution(
                command, skills, current_cwd, project_cwd, checker, home_dir=home_dir
            ):
                continue
            result = check_command(command.executable, command.args, config, ctx)

        if not result.allowed:
            reason = f'command "{command.display()}": {result.reason}'
            logger.debug(f"Denied: {reason}")
            return PermissionCheckResult.deny(reason)

    return PermissionCheckResult.allow()


def is_command_allowed_by_config(
    command: str,
    config: PermissionConfig,
    *,
    cwd: AbsFilePath | Path | str,
    gitignore: Gitignore | None = None,
    skills_paths: Sequence[str] | None = None,
    file_checker: FileChecker | None = None,
    home_dir: str | None = None,
) -> PermissionCheckResult:
    """Parse ``command`` and check it; syntax errors become denials."""
    try:
        parsed = parse(command)
    except ShellSyntaxError as exc:
        logger.debug(f"Failed to parse command {command!r}: {exc}")
        return PermissionCheckResult.deny(f"failed to parse command: {exc}")

    return check_command_list_permissions(
        parsed,
        config,
        cwd=cwd,
        gitignore=gitignore,
        skills_paths=skills_paths,
        file_checker=file_checker,
        home_dir=home_dir,
    )


__all__ = [
    "NULL_DEVICE",
    "PermissionCheckResult",
    "PermissionConfig",
    "check_cd_command",
    "check_command",
    "check_command_list_permissions",
    "check_redirects",
    "is_command_allowed_by_config",
    "process_cd_command",
]
