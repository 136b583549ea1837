"""Shell command validation for coding agents."""

from shellgate.bash import LexerError, ParserError, ShellSyntaxError, parse, tokenize
from shellgate.permissions import (
    BUILTIN_COMMAND_PERMISSIONS,
    CommandSpec,
    PermissionCheckResult,
    check_command_list_permissions,
    is_command_allowed_by_config,
)
from shellgate.sandbox import ShellSandbox

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_COMMAND_PERMISSIONS",
    "CommandSpec",
    "LexerError",
    "ParserError",
    "PermissionCheckResult",
    "ShellSandbox",
    "ShellSyntaxError",
    "check_command_list_permissions",
    "is_command_allowed_by_config",
    "parse",
    "tokenize",
]
