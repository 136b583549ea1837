"""Allowlist entries that are always available.

Only read-only inspection commands are listed. Commands that can execute
code taken from their arguments (``awk``, ``sed``, ``xargs``, ``find -exec``)
are left to user configuration, and search patterns must not start with
``-`` so they cannot be swapped for options such as ``rg --pre``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from shellgate.permissions.spec import CommandSpec, load_command_permissions

_OPTIONAL_FILE: dict[str, Any] = {"group": [{"file": True}], "optional": True}
_SEARCH_TERM: dict[str, Any] = {"pattern": "[^-].*"}

_LINE_COUNT_ARGS: list[list[Any]] = [
    [{"group": ["-n", {"pattern": "[0-9]+"}], "optional": True}, _OPTIONAL_FILE],
    [{"pattern": "-[0-9]+"}, _OPTIONAL_FILE],
]


def _git_flags(*flags: str | list[Any]) -> dict[str, Any]:
    """Optional flags accepted in any order, each at most once."""
    groups = [
        {"group": flag if isinstance(flag, list) else [flag], "optional": True} for flag in flags
    ]
    return {"group": groups, "optional": True, "anyOrder": True}


_BUILTIN_RAW: dict[str, Any] = {
    "ls": {"allowAll": True},
    "pwd": {"args": [[]]},
    "echo": {"allowAll": True},
    "cat": {"args": [[{"file": True}]]},
    "head": {"args": _LINE_COUNT_ARGS},
    "tail": {"args": _LINE_COUNT_ARGS},
    "wc": {"args": [[{"group": ["-l"], "optional": True}, _OPTIONAL_FILE]]},
    "grep": {
        "args": [
            [{"group": ["-i"], "optional": True}, _SEARCH_TERM, {"restFiles": True}],
        ]
    },
    "sort": {"args": [[_OPTIONAL_FILE]]},
    "uniq": {"args": [[_OPTIONAL_FILE]]},
    "cut": {"args": [["-d", {"any": True}, "-f", {"any": True}, _OPTIONAL_FILE]]},
    "tr": {"allowAll": True},
    "rg": {
        "args": [
            [
                {"group": ["-l"], "optional": True},
                _SEARCH_TERM,
                {"group": ["--type", {"pattern": "[A-Za-z0-9_]+"}], "optional": True},
                {"restFiles": True},
            ]
        ]
    },
    "fd": {
        "args": [
            [
                {"group": ["-t", {"pattern": "[fdl]"}], "optional": True},
                {"group": ["-e", {"pattern": "[A-Za-z0-9_]+"}], "optional": True},
                {"group": [_SEARCH_TERM], "optional": True},
                _OPTIONAL_FILE,
            ]
        ]
    },
    "git": {
        "subCommands": {
            "status": {"allowAll": True},
            # log/diff/show accept --output=<file>, so options are listed explicitly
            "log": {"args": [[_git_flags("--oneline", "--stat", ["-n", {"pattern": "[0-9]+"}]), {"restFiles": True}]]},
            "diff": {"args": [[_git_flags("--stat", "--cached", "--name-only"), {"restFiles": True}]]},
            "show": {"args": [[_git_flags("--stat", "--name-only"), {"restFiles": True}]]},
            "branch": {"args": [[], ["-a"], ["--list"], ["--show-current"]]},
        }
    },
}

BUILTIN_COMMAND_PERMISSIONS: MappingProxyType[str, CommandSpec] = MappingProxyType(
    load_command_permissions(_BUILTIN_RAW)
)

__all__ = ["BUILTIN_COMMAND_PERMISSIONS"]
