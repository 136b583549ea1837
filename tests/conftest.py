"""Pytest configuration helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear cached settings and drop SHELLGATE_* overrides between tests."""
    from shellgate import settings

    for name in ("SKILLS_PATHS", "INCLUDE_BUILTINS", "RESPECT_GITIGNORE", "LOG_LEVEL"):
        monkeypatch.delenv(f"SHELLGATE_{name}", raising=False)
    settings.get_guard_settings.cache_clear()
    try:
        yield
    finally:
        settings.get_guard_settings.cache_clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project tree with regular, nested, hidden and skills files."""
    root = tmp_path / "project"
    root.mkdir()

    skill_dir = root / ".magenta" / "skills" / "test-skill"
    skill_dir.mkdir(parents=True)
    (skill_dir / "script.sh").write_text("#!/bin/bash\necho hello\n", encoding="utf-8")
    (skill_dir / "script.ts").write_text("console.log('hello')\n", encoding="utf-8")

    (root / "file.txt").write_text("test content\n", encoding="utf-8")
    (root / "other.txt").write_text("other content\n", encoding="utf-8")
    (root / "subdir").mkdir()
    (root / "subdir" / "nested.txt").write_text("nested\n", encoding="utf-8")

    (root / ".hidden").mkdir()
    (root / ".hidden" / "secret.txt").write_text("secret\n", encoding="utf-8")
    return root


@pytest.fixture
def skills_dir(project: Path) -> Path:
    return project / ".magenta" / "skills"
