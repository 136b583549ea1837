"""Path resolution and the project path-safety check.

Three string flavours are kept apart by type: ``UnresolvedFilePath`` is what a
command line contains, ``AbsFilePath`` is the result of resolving it against a
base directory, and ``RelFilePath`` is an absolute path expressed relative to
the project root. Conversions only happen through the helpers below.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import NewType

from shellgate.permissions.gitignore import Gitignore

AbsFilePath = NewType("AbsFilePath", str)
RelFilePath = NewType("RelFilePath", str)
UnresolvedFilePath = NewType("UnresolvedFilePath", str)

# ~+ (PWD), ~- (OLDPWD) and ~N, ~+N, ~-N (directory stack entries)
_DIRECTORY_STACK_PREFIX = re.compile(r"~(?:[+-]\d*|\d+)(?:/|$)")


def home_directory() -> AbsFilePath:
    return AbsFilePath(os.path.expanduser("~"))


def expand_tilde(path: str, home_dir: str | None = None) -> str:
    """Expand ``~``, ``~/...`` and ``~user/...`` the way the shell would."""
    if not path.startswith("~"):
        return path
    if path == "~" or path.startswith("~/"):
        home = home_dir if home_dir is not None else home_directory()
        return home + path[1:]
    # ~user forms; unknown users are left untouched, as in bash
    return os.path.expanduser(path)


def is_directory_stack_reference(path: str) -> bool:
    """Whether ``path`` starts with a tilde prefix that expands from shell state."""
    return _DIRECTORY_STACK_PREFIX.match(path) is not None


def resolve_file_path(base: AbsFilePath | str, path: UnresolvedFilePath | str) -> AbsFilePath:
    """Resolve ``path`` against ``base`` lexically (``..`` segments collapse)."""
    return AbsFilePath(os.path.normpath(os.path.join(base, path)))


def relative_path(root: AbsFilePath | str, path: AbsFilePath | str) -> RelFilePath:
    return RelFilePath(os.path.relpath(path, root))


def is_within(root: AbsFilePath | str, path: AbsFilePath | str) -> bool:
    """Return True when ``path`` equals ``root`` or is a descendant of it."""
    root_norm = os.path.normpath(root)
    path_norm = os.path.normpath(path)
    if path_norm == root_norm:
        return True
    prefix = root_norm if root_norm.endswith(os.sep) else root_norm + os.sep
    return path_norm.startswith(prefix)


@dataclass(frozen=True, slots=True)
class PathCheck:
    safe: bool
    reason: str | None = None


def is_path_safe(
    file_path: str,
    current_cwd: AbsFilePath | str,
    project_cwd: AbsFilePath | str,
    gitignore: Gitignore,
    *,
    home_dir: str | None = None,
) -> PathCheck:
    """Check that ``file_path`` stays inside the project and is neither hidden nor ignored.

    The path is resolved against the simulated ``current_cwd``; containment is
    always judged against the fixed ``project_cwd``. Symlinks are followed on
    both sides so a link pointing out of the project counts as outside.

    Args:
        file_path: Argument exactly as it appeared on the command line.
        current_cwd: Working directory after any preceding ``cd``.
        project_cwd: Project root the command must stay within.
        gitignore: Matcher consulted with the project-relative path.
        home_dir: Override for ``~`` expansion.

    Returns:
        PathCheck describing the first failed rule, or ``safe=True``.
    """
    if is_directory_stack_reference(file_path):
        return PathCheck(False, f'path "{file_path}" refers to the shell directory stack')

    expanded = expand_tilde(file_path, home_dir)
    abs_path = resolve_file_path(current_cwd, expanded)

    real_root = os.path.realpath(project_cwd)
    real_path = os.path.realpath(abs_path)
    if not is_within(real_root, real_path):
        return PathCheck(False, f'path "{file_path}" is outside project directory')

    rel_path = relative_path(real_root, real_path)
    if rel_path != os.curdir and any(part.startswith(".") for part in rel_path.split(os.sep)):
        return PathCheck(False, f'path "{file_path}" contains hidden directory or file')

    if rel_path != os.curdir and gitignore.ignores(rel_path):
        return PathCheck(False, f'path "{file_path}" is gitignored')

    return PathCheck(True)


__all__ = [
    "AbsFilePath",
    "PathCheck",
    "RelFilePath",
    "UnresolvedFilePath",
    "expand_tilde",
    "home_directory",
    "is_directory_stack_reference",
    "is_path_safe",
    "is_within",
    "relative_path",
    "resolve_file_path",
]
