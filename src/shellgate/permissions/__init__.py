"""Allowlist-based permission checks for parsed shell commands."""

from shellgate.permissions.builtin import BUILTIN_COMMAND_PERMISSIONS
from shellgate.permissions.engine import (
    PermissionCheckResult,
    PermissionConfig,
    check_command_list_permissions,
    is_command_allowed_by_config,
)
from shellgate.permissions.gitignore import Gitignore, GitignoreMatcher, NullGitignore
from shellgate.permissions.matcher import PatternStructureError, match_args_pattern
from shellgate.permissions.paths import (
    AbsFilePath,
    PathCheck,
    RelFilePath,
    UnresolvedFilePath,
    is_path_safe,
)
from shellgate.permissions.skills import FileChecker, LocalFileChecker
from shellgate.permissions.spec import (
    AnyArg,
    ArgSpec,
    CommandPermissions,
    CommandSpec,
    FileArg,
    GroupArg,
    LiteralArg,
    PatternArg,
    PermissionConfigError,
    RestAnyArg,
    RestFilesArg,
    load_command_permissions,
    merge_command_permissions,
)

__all__ = [
    "AbsFilePath",
    "AnyArg",
    "ArgSpec",
    "BUILTIN_COMMAND_PERMISSIONS",
    "CommandPermissions",
    "CommandSpec",
    "FileArg",
    "FileChecker",
    "Gitignore",
    "GitignoreMatcher",
    "GroupArg",
    "LiteralArg",
    "LocalFileChecker",
    "NullGitignore",
    "PathCheck",
    "PatternArg",
    "PatternStructureError",
    "PermissionCheckResult",
    "PermissionConfig",
    "PermissionConfigError",
    "RelFilePath",
    "RestAnyArg",
    "RestFilesArg",
    "UnresolvedFilePath",
    "check_command_list_permissions",
    "is_command_allowed_by_config",
    "is_path_safe",
    "load_command_permissions",
    "match_args_pattern",
    "merge_command_permissions",
]
