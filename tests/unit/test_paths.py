from __future__ import annotations

import os
from pathlib import Path

import pytest

from shellgate.permissions.gitignore import GitignoreMatcher, NullGitignore
from shellgate.permissions.paths import (
    expand_tilde,
    is_directory_stack_reference,
    is_path_safe,
    is_within,
    relative_path,
    resolve_file_path,
)


def test_expand_tilde_uses_home_override() -> None:
    assert expand_tilde("~", "/home/me") == "/home/me"
    assert expand_tilde("~/notes.txt", "/home/me") == "/home/me/notes.txt"
    assert expand_tilde("notes~.txt", "/home/me") == "notes~.txt"


def test_expand_tilde_user_form_matches_shell() -> None:
    assert expand_tilde("~root/x") == os.path.expanduser("~root/x")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("~-", True),
        ("~+/file.txt", True),
        ("~1/x", True),
        ("~-2", True),
        ("~+3/x", True),
        ("~", False),
        ("~/x", False),
        ("~root/x", False),
        ("~-x/y", False),
        ("a/~-/b", False),
    ],
)
def test_is_directory_stack_reference(path: str, expected: bool) -> None:
    assert is_directory_stack_reference(path) is expected


def test_directory_stack_paths_are_unsafe(tmp_path: Path) -> None:
    check = is_path_safe("~-/passwd", str(tmp_path), str(tmp_path), NullGitignore())
    assert not check.safe
    assert check.reason == 'path "~-/passwd" refers to the shell directory stack'


def test_resolve_and_relative_paths() -> None:
    assert resolve_file_path("/repo/src", "../README.md") == "/repo/README.md"
    assert resolve_file_path("/repo", "/etc/passwd") == "/etc/passwd"
    assert relative_path("/repo", "/repo/src/app.py") == os.path.join("src", "app.py")


@pytest.mark.parametrize(
    ("path", "expected"),
    [("/repo", True), ("/repo/a/b", True), ("/repository", False), ("/", False)],
)
def test_is_within(path: str, expected: bool) -> None:
    assert is_within("/repo", path) is expected


def test_safe_path_inside_project(project: Path) -> None:
    check = is_path_safe("subdir/nested.txt", project, project, NullGitignore())
    assert check.safe
    assert check.reason is None


def test_project_root_itself_is_safe(project: Path) -> None:
    assert is_path_safe(".", project, project, NullGitignore()).safe


@pytest.mark.parametrize("path", ["/etc/passwd", "../../../etc/passwd", "..", "~/secrets"])
def test_paths_outside_project_are_rejected(project: Path, path: str) -> None:
    check = is_path_safe(path, project, project, NullGitignore(), home_dir="/home/someone")
    assert not check.safe
    assert check.reason == f'path "{path}" is outside project directory'


def test_resolution_uses_current_directory(project: Path) -> None:
    subdir = project / "subdir"
    assert is_path_safe("nested.txt", subdir, project, NullGitignore()).safe
    assert is_path_safe("../file.txt", subdir, project, NullGitignore()).safe
    assert not is_path_safe("../../file.txt", subdir, project, NullGitignore()).safe


@pytest.mark.parametrize("path", [".hidden/secret.txt", ".env", "subdir/.cache/x"])
def test_hidden_paths_are_rejected(project: Path, path: str) -> None:
    check = is_path_safe(path, project, project, NullGitignore())
    assert not check.safe
    assert check.reason is not None
    assert "contains hidden directory or file" in check.reason


def test_gitignored_paths_are_rejected(project: Path) -> None:
    gitignore = GitignoreMatcher.from_lines(["*.log", "build/"])
    assert not is_path_safe("debug.log", project, project, gitignore).safe
    assert not is_path_safe("build/out.js", project, project, gitignore).safe
    check = is_path_safe("build", project, project, gitignore)
    assert check.reason == 'path "build" is gitignored'
    assert is_path_safe("file.txt", project, project, gitignore).safe


def test_checks_short_circuit_in_order(project: Path) -> None:
    gitignore = GitignoreMatcher.from_lines([".hidden/"])
    check = is_path_safe(".hidden/secret.txt", project, project, gitignore)
    assert check.reason is not None
    assert "hidden" in check.reason


def test_symlink_escaping_project_is_outside(project: Path, tmp_path: Path) -> None:
    outside = tmp_path / "outside.txt"
    outside.write_text("x", encoding="utf-8")
    (project / "link.txt").symlink_to(outside)

    check = is_path_safe("link.txt", project, project, NullGitignore())
    assert not check.safe
    assert check.reason is not None
    assert "outside project directory" in check.reason


def test_gitignore_matcher_from_root(project: Path) -> None:
    (project / ".gitignore").write_text("node_modules/\n*.tmp\n", encoding="utf-8")
    matcher = GitignoreMatcher.from_root(project)
    assert matcher.ignores("node_modules/pkg/index.js")
    assert matcher.ignores("scratch.tmp")
    assert not matcher.ignores("src/index.js")


def test_gitignore_matcher_without_file(project: Path) -> None:
    assert not GitignoreMatcher.from_root(project).ignores("anything.txt")
