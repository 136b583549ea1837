"""Sandbox guardrails for agent-issued shell commands."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

import anyio

from shellgate.permissions.builtin import BUILTIN_COMMAND_PERMISSIONS
from shellgate.permissions.engine import PermissionCheckResult, is_command_allowed_by_config
from shellgate.permissions.gitignore import Gitignore, GitignoreMatcher, NullGitignore
from shellgate.permissions.skills import FileChecker, LocalFileChecker
from shellgate.permissions.spec import (
    CommandSpec,
    load_command_permissions,
    merge_command_permissions,
)
from shellgate.settings import GuardSettings, get_guard_settings

logger = logging.getLogger(__name__)


def _builtin_permissions() -> dict[str, CommandSpec]:
    return dict(BUILTIN_COMMAND_PERMISSIONS)


@dataclass
class ShellSandbox:
    """Command policy rooted at a project directory."""

    root: Path = field(default_factory=lambda: Path.cwd())
    permissions: Mapping[str, CommandSpec] = field(default_factory=_builtin_permissions)
    skills_paths: Sequence[str] = ()
    gitignore: Gitignore = field(default_factory=NullGitignore)
    file_checker: FileChecker = field(default_factory=LocalFileChecker)
    home_dir: str | None = None

    @classmethod
    def from_settings(
        cls,
        root: Path | str,
        permissions: Mapping[str, Any] | None = None,
        *,
        settings: GuardSettings | None = None,
        include_builtins: bool | None = None,
        skills_paths: Sequence[str] | None = None,
    ) -> "ShellSandbox":
        """Build a sandbox from ``SHELLGATE_*`` settings and an optional user allowlist.

        ``include_builtins`` and ``skills_paths`` override the matching settings
        when given.

        Raises:
            PermissionConfigError: if ``permissions`` is malformed.
        """
        settings = settings or get_guard_settings()
        root_path = Path(root).resolve()
        if include_builtins is None:
            include_builtins = settings.INCLUDE_BUILTINS
        if include_builtins:
            merged = merge_command_permissions(BUILTIN_COMMAND_PERMISSIONS, permissions or {})
        else:
            merged = load_command_permissions(permissions or {})
        gitignore: Gitignore = (
            GitignoreMatcher.from_root(root_path) if settings.RESPECT_GITIGNORE else NullGitignore()
        )
        return cls(
            root=root_path,
            permissions=merged,
            skills_paths=list(skills_paths) if skills_paths else settings.skills_paths,
            gitignore=gitignore,
        )

    def check(self, command: str) -> PermissionCheckResult:
        """Validate ``command`` against the sandbox policy."""
        return is_command_allowed_by_config(
            command,
            self.permissions,
            cwd=self.root,
            gitignore=self.gitignore,
            skills_paths=self.skills_paths,
            file_checker=self.file_checker,
            home_dir=self.home_dir,
        )

    async def acheck(self, command: str) -> PermissionCheckResult:
        """Validate on a worker thread so filesystem probes never block the loop."""
        return await anyio.to_thread.run_sync(partial(self.check, command))

    def is_command_allowed(self, command: str) -> bool:
        return self.check(command).allowed

    def enforce_command(self, command: str) -> None:
        """Raise if the requested command is not permitted."""
        result = self.check(command)
        if not result.allowed:
            logger.info(f"Rejected command in sandbox {self.root}: {result.reason}")
            raise PermissionError(f"Command is not allowed in the shell sandbox: {result.reason}")

    def describe(self) -> dict[str, object]:
        """Return a serializable snapshot of the sandbox policy."""
        return {
            "root": str(self.root),
            "commands": sorted(self.permissions),
            "skills_paths": list(self.skills_paths),
            "gitignore": type(self.gitignore).__name__,
        }


__all__ = ["ShellSandbox"]
