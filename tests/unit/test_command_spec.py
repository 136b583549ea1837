from __future__ import annotations

import pytest
from pydantic import ValidationError

from shellgate.permissions.spec import (
    AnyArg,
    CommandSpec,
    FileArg,
    GroupArg,
    LiteralArg,
    PatternArg,
    PermissionConfigError,
    RestAnyArg,
    RestFilesArg,
    coerce_arg_spec,
    load_command_permissions,
    merge_command_permissions,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("status", LiteralArg(value="status")),
        ({"file": True}, FileArg()),
        ({"restFiles": True}, RestFilesArg()),
        ({"restAny": True}, RestAnyArg()),
        ({"any": True}, AnyArg()),
        ({"pattern": "-[0-9]+"}, PatternArg(pattern="-[0-9]+")),
        ({"type": "file"}, FileArg()),
        ({"kind": "literal", "value": "-n"}, LiteralArg(value="-n")),
    ],
)
def test_coerce_arg_spec_shorthand(raw: object, expected: object) -> None:
    assert coerce_arg_spec(raw) == expected


def test_coerce_group_with_flags() -> None:
    group = coerce_arg_spec({"group": ["-n", {"any": True}], "optional": True, "anyOrder": True})
    assert isinstance(group, GroupArg)
    assert group.specs == (LiteralArg(value="-n"), AnyArg())
    assert group.optional is True
    assert group.any_order is True


def test_coerce_typed_group() -> None:
    group = coerce_arg_spec({"type": "group", "args": ["-l"]})
    assert isinstance(group, GroupArg)
    assert group.specs == (LiteralArg(value="-l"),)
    assert group.optional is False


@pytest.mark.parametrize("raw", [42, {"unknown": True}, {"file": False}, {"type": "nope"}, {"type": "literal"}, {"kind": "pattern"}])
def test_coerce_rejects_unknown_specs(raw: object) -> None:
    with pytest.raises(PermissionConfigError):
        coerce_arg_spec(raw)


def test_invalid_regex_is_rejected() -> None:
    with pytest.raises(ValidationError):
        PatternArg(pattern="([unclosed")


def test_pattern_is_anchored() -> None:
    spec = PatternArg(pattern="-[0-9]+")
    assert spec.matches("-50")
    assert not spec.matches("-50abc")
    assert not spec.matches("x-50")


def test_command_spec_accepts_nested_aliases() -> None:
    spec = CommandSpec.model_validate(
        {
            "subCommands": {
                "run": {"allowAll": True},
                "test": {"args": [[], [{"restFiles": True}]]},
            }
        }
    )
    assert spec.sub_commands is not None
    assert spec.sub_commands["run"].allow_all is True
    assert spec.sub_commands["test"].args == ((), (RestFilesArg(),))


def test_command_spec_rejects_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        CommandSpec.model_validate({"allowEverything": True})


def test_rest_spec_must_be_last_in_pattern() -> None:
    with pytest.raises(ValidationError, match="restAny must be last in pattern"):
        CommandSpec.model_validate({"args": [[{"restAny": True}, "x"]]})


def test_rest_spec_not_allowed_inside_group() -> None:
    with pytest.raises(ValidationError, match="restFiles not allowed inside group"):
        CommandSpec.model_validate({"args": [[{"group": [{"restFiles": True}]}]]})


def test_load_command_permissions_wraps_errors() -> None:
    with pytest.raises(PermissionConfigError, match="invalid permissions for 'cat'"):
        load_command_permissions({"cat": {"args": "file"}})


def test_specs_are_immutable() -> None:
    spec = CommandSpec(allow_all=True)
    with pytest.raises(ValidationError):
        spec.allow_all = False  # type: ignore[misc]


def test_merge_combines_subcommands_and_patterns() -> None:
    merged = merge_command_permissions(
        {"git": {"subCommands": {"status": {"allowAll": True}}}, "cat": {"args": [[{"file": True}]]}},
        {"git": {"subCommands": {"add": {"args": [[{"restFiles": True}]]}}}, "cat": {"args": [["-n", {"file": True}]]}},
    )
    git_subcommands = merged["git"].sub_commands
    assert git_subcommands is not None
    assert set(git_subcommands) == {"status", "add"}
    assert merged["cat"].args == ((FileArg(),), (LiteralArg(value="-n"), FileArg()))


def test_merge_treats_missing_args_as_bare_command() -> None:
    merged = merge_command_permissions({"ls": {}}, {"ls": {"args": [["-l"]]}})
    assert merged["ls"].args == ((), (LiteralArg(value="-l"),))
