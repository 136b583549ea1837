from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from shellgate.bash.parser import ParsedCommand, parse
from shellgate.permissions.engine import is_command_allowed_by_config
from shellgate.permissions.paths import AbsFilePath
from shellgate.permissions.skills import find_skills_script, is_skills_script_execution

PROJECT = "/work/project"
SKILLS = ["/work/project/skills"]


@dataclass
class FakeFileChecker:
    files: set[str] = field(default_factory=set)
    probed: list[str] = field(default_factory=list)

    def is_regular_file(self, path: AbsFilePath) -> bool:
        self.probed.append(path)
        return path in self.files


def _command(text: str) -> ParsedCommand:
    return parse(text).commands[0]


@pytest.mark.parametrize(
    ("text", "script"),
    [
        ("./run.sh", "./run.sh"),
        ("/abs/run.sh --flag", "/abs/run.sh"),
        ("~/bin/run.sh", "~/bin/run.sh"),
        ("bash run.sh", "run.sh"),
        ("zsh run.sh", "run.sh"),
        ("python3 tool.py --x", "tool.py"),
        ("python2 tool.py", "tool.py"),
        ("nodejs tool.js", "tool.js"),
        ("npx tsx tool.ts", "tool.ts"),
        ("pkgx tsx tool.ts", "tool.ts"),
        ("pkgx bash run.sh", "run.sh"),
    ],
)
def test_find_skills_script(text: str, script: str) -> None:
    assert find_skills_script(_command(text)) == script


@pytest.mark.parametrize(
    "text",
    ["bash", "python3.11 tool.py", "npx prettier tool.ts", "pkgx ruby tool.rb", "pkgx tsx", "cat run.sh", "bashx run.sh"],
)
def test_unrecognized_runners(text: str) -> None:
    assert find_skills_script(_command(text)) is None


def test_skills_execution_uses_injected_checker() -> None:
    checker = FakeFileChecker(files={"/work/project/skills/lint/run.sh"})
    command = _command("bash skills/lint/run.sh")
    assert is_skills_script_execution(command, SKILLS, PROJECT, PROJECT, checker)
    assert checker.probed == ["/work/project/skills/lint/run.sh"]


def test_script_path_resolves_against_current_directory() -> None:
    checker = FakeFileChecker(files={"/work/project/skills/lint/run.sh"})
    command = _command("./run.sh")
    assert is_skills_script_execution(command, SKILLS, "/work/project/skills/lint", PROJECT, checker)


def test_existing_file_outside_skills_dir_is_not_trusted() -> None:
    checker = FakeFileChecker(files={"/work/project/scripts/run.sh"})
    command = _command("bash scripts/run.sh")
    assert not is_skills_script_execution(command, SKILLS, PROJECT, PROJECT, checker)


def test_sibling_directory_with_common_prefix_is_not_trusted() -> None:
    checker = FakeFileChecker(files={"/work/project/skills-evil/run.sh"})
    command = _command("bash skills-evil/run.sh")
    assert not is_skills_script_execution(command, SKILLS, PROJECT, PROJECT, checker)


def test_no_skills_paths_skips_probe() -> None:
    checker = FakeFileChecker(files={"/work/project/skills/run.sh"})
    assert not is_skills_script_execution(_command("bash skills/run.sh"), [], PROJECT, PROJECT, checker)
    assert checker.probed == []


def test_tilde_skills_path_uses_home_override() -> None:
    checker = FakeFileChecker(files={"/home/me/.skills/x/run.sh"})
    command = _command("~/.skills/x/run.sh")
    assert is_skills_script_execution(
        command, ["~/.skills"], PROJECT, PROJECT, checker, home_dir="/home/me"
    )


def test_directory_stack_script_is_not_trusted() -> None:
    checker = FakeFileChecker(files={"/work/project/~-/skills/run.sh"})
    command = _command("bash ~-/skills/run.sh")
    assert not is_skills_script_execution(command, ["~-/skills"], PROJECT, PROJECT, checker)
    assert checker.probed == []


def test_engine_accepts_fake_checker() -> None:
    checker = FakeFileChecker(files={"/work/project/skills/lint/run.sh"})
    result = is_command_allowed_by_config(
        "python skills/lint/run.sh && rm -rf /",
        {},
        cwd=PROJECT,
        skills_paths=SKILLS,
        file_checker=checker,
    )
    assert not result.allowed
    assert result.reason == 'command "rm -rf /": "rm" is not in the allowlist'
