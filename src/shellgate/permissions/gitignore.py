"""Gitignore matchers consulted by the path-safety check."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

import pathspec

logger = logging.getLogger(__name__)


@runtime_checkable
class Gitignore(Protocol):
    """Anything that can answer whether a project-relative path is ignored."""

    def ignores(self, rel_path: str) -> bool: ...


class NullGitignore:
    """Matcher that ignores nothing."""

    def ignores(self, rel_path: str) -> bool:
        return False


class GitignoreMatcher:
    """``.gitignore`` rule evaluation backed by ``pathspec``."""

    def __init__(self, spec: pathspec.PathSpec) -> None:
        self._spec = spec

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "GitignoreMatcher":
        return cls(pathspec.GitIgnoreSpec.from_lines(lines))

    @classmethod
    def from_root(cls, root: Path | str) -> "GitignoreMatcher":
        """Load ``<root>/.gitignore``; a missing file yields an empty matcher."""
        gitignore_path = Path(root) / ".gitignore"
        if not gitignore_path.is_file():
            logger.debug(f"No .gitignore found under {root}")
            return cls.from_lines([])
        lines = gitignore_path.read_text(encoding="utf-8").splitlines()
        logger.debug(f"Loaded {len(lines)} gitignore lines from {gitignore_path}")
        return cls.from_lines(lines)

    def ignores(self, rel_path: str) -> bool:
        normalized = rel_path.replace("\\", "/")
        if self._spec.match_file(normalized):
            return True
        # a directory rule such as "build/" also covers the bare directory name
        return self._spec.match_file(normalized.rstrip("/") + "/")


__all__ = ["Gitignore", "GitignoreMatcher", "NullGitignore"]
