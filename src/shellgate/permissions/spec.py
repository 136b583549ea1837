"""Allowlist data model: argument specs and hierarchical command specs.

A configuration maps each executable to a ``CommandSpec``. A spec may descend
into ``sub_commands`` keyed by the next literal argument, allow every
remaining argument (``allow_all``), or list alternative argument patterns
(``args``) built from the ``ArgSpec`` variants below.

Configuration loaders usually hand over plain JSON-like data. The shorthand
accepted by ``coerce_arg_spec`` is::

    "status"                                  -> LiteralArg
    {"file": true}                            -> FileArg
    {"restFiles": true}                       -> RestFilesArg
    {"restAny": true}                         -> RestAnyArg
    {"any": true}                             -> AnyArg
    {"pattern": "-[0-9]+"}                    -> PatternArg
    {"group": [...], "optional": true, "anyOrder": false} -> GroupArg
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator


class PermissionConfigError(ValueError):
    """Raised when an allowlist configuration is structurally invalid."""


class LiteralArg(BaseModel):
    """Exactly one argument equal to ``value``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    value: str


class FileArg(BaseModel):
    """One argument that must be a safe path inside the project."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"


class RestFilesArg(BaseModel):
    """Zero or more trailing arguments, each a safe path. Must come last."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["restFiles"] = "restFiles"


class RestAnyArg(BaseModel):
    """Zero or more trailing arguments of any content. Must come last."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["restAny"] = "restAny"


class AnyArg(BaseModel):
    """Exactly one argument of any content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["any"] = "any"


class PatternArg(BaseModel):
    """One argument that fully matches the regular expression ``pattern``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pattern"] = "pattern"
    pattern: str

    @field_validator("pattern")
    @classmethod
    def _validate_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid regular expression {value!r}: {exc}") from None
        return value

    def matches(self, argument: str) -> bool:
        return re.fullmatch(self.pattern, argument) is not None


class GroupArg(BaseModel):
    """A sub-sequence of specs matched in order, or in any order.

    An ``optional`` group that fails to match consumes nothing instead of
    failing the surrounding pattern.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["group"] = "group"
    specs: tuple["ArgSpec", ...] = Field(
        validation_alias=AliasChoices("specs", "group", "args"),
    )
    optional: bool = False
    any_order: bool = Field(
        default=False,
        validation_alias=AliasChoices("any_order", "anyOrder"),
    )

    @field_validator("specs", mode="before")
    @classmethod
    def _coerce_specs(cls, value: Any) -> tuple[Any, ...]:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise ValueError("group specs must be a list")
        specs = _coerce_sequence(value)
        for spec in specs:
            if isinstance(spec, (RestFilesArg, RestAnyArg)):
                raise ValueError(f"{spec.kind} not allowed inside group")
        return specs


ArgSpec = Annotated[
    Union[LiteralArg, FileArg, RestFilesArg, RestAnyArg, AnyArg, PatternArg, GroupArg],
    Field(discriminator="kind"),
]
ArgPattern = tuple[ArgSpec, ...]

_ARG_SPEC_TYPES = (LiteralArg, FileArg, RestFilesArg, RestAnyArg, AnyArg, PatternArg, GroupArg)
_FLAG_SPECS: dict[str, type[BaseModel]] = {
    "file": FileArg,
    "restFiles": RestFilesArg,
    "restAny": RestAnyArg,
    "any": AnyArg,
}

GroupArg.model_rebuild()


def _required_field(raw: Mapping[str, Any], key: str) -> Any:
    value = raw.get(key)
    if value is None:
        raise PermissionConfigError(f"argument spec {dict(raw)!r} is missing {key!r}")
    return value


def coerce_arg_spec(raw: Any) -> Any:
    """Convert configuration shorthand into an ``ArgSpec`` model."""
    if isinstance(raw, _ARG_SPEC_TYPES):
        return raw
    if isinstance(raw, str):
        return LiteralArg(value=raw)
    if not isinstance(raw, Mapping):
        raise PermissionConfigError(f"unrecognized argument spec: {raw!r}")

    # {"type": "file"} style, as well as dumped models using "kind"
    kind = raw.get("kind", raw.get("type"))
    if isinstance(kind, str):
        if kind == "literal":
            return LiteralArg(value=_required_field(raw, "value"))
        if kind in _FLAG_SPECS:
            return _FLAG_SPECS[kind]()
        if kind == "pattern":
            return PatternArg(pattern=_required_field(raw, "pattern"))
        if kind == "group":
            return GroupArg.model_validate({k: v for k, v in raw.items() if k not in {"kind", "type"}})
        raise PermissionConfigError(f"unknown argument spec type {kind!r}")

    if "group" in raw:
        return GroupArg.model_validate(dict(raw))
    if "pattern" in raw:
        return PatternArg(pattern=raw["pattern"])
    for key, model in _FLAG_SPECS.items():
        if raw.get(key):
            return model()
    raise PermissionConfigError(f"unrecognized argument spec: {dict(raw)!r}")


def check_pattern_structure(pattern: Sequence[Any]) -> None:
    """Reject ``restFiles``/``restAny`` anywhere but the final slot."""
    last = len(pattern) - 1
    for index, spec in enumerate(pattern):
        if isinstance(spec, (RestFilesArg, RestAnyArg)) and index != last:
            raise ValueError(f"{spec.kind} must be last in pattern")


def _coerce_sequence(items: Sequence[Any]) -> tuple[Any, ...]:
    try:
        return tuple(coerce_arg_spec(item) for item in items)
    except ValidationError as exc:
        raise ValueError(str(exc)) from None


class CommandSpec(BaseModel):
    """Permission node for an executable or one of its subcommands."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sub_commands: dict[str, "CommandSpec"] | None = Field(
        default=None,
        validation_alias=AliasChoices("sub_commands", "subCommands"),
        description="Nested specs keyed by the next literal argument",
    )
    args: tuple[ArgPattern, ...] | None = Field(
        default=None,
        description="Alternative argument patterns; the first full match wins",
    )
    allow_all: bool = Field(
        default=False,
        validation_alias=AliasChoices("allow_all", "allowAll"),
        description="Permit any remaining arguments once this node is reached",
    )

    @field_validator("args", mode="before")
    @classmethod
    def _coerce_args(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise ValueError("args must be a list of argument patterns")
        patterns = []
        for pattern in value:
            if isinstance(pattern, (str, bytes)) or not isinstance(pattern, Sequence):
                raise ValueError("each argument pattern must be a list")
            coerced = _coerce_sequence(pattern)
            check_pattern_structure(coerced)
            patterns.append(coerced)
        return tuple(patterns)


CommandSpec.model_rebuild()

CommandPermissions = Mapping[str, CommandSpec]


def load_command_spec(raw: CommandSpec | Mapping[str, Any]) -> CommandSpec:
    if isinstance(raw, CommandSpec):
        return raw
    return CommandSpec.model_validate(raw)


def load_command_permissions(raw: Mapping[str, Any]) -> dict[str, CommandSpec]:
    """Validate an in-memory allowlist mapping into ``CommandSpec`` models.

    Raises:
        PermissionConfigError: if any entry is malformed.
    """
    permissions: dict[str, CommandSpec] = {}
    for executable, value in raw.items():
        try:
            permissions[executable] = load_command_spec(value)
        except (ValidationError, PermissionConfigError) as exc:
            raise PermissionConfigError(
                f"invalid permissions for {executable!r}: {exc}"
            ) from exc
    return permissions


def _patterns_of(spec: CommandSpec) -> tuple[ArgPattern, ...]:
    # a node without ``args`` accepts exactly zero arguments
    return spec.args if spec.args is not None else ((),)


def merge_command_specs(base: CommandSpec, extra: CommandSpec) -> CommandSpec:
    sub_commands: dict[str, CommandSpec] | None = None
    if base.sub_commands is not None or extra.sub_commands is not None:
        sub_commands = dict(base.sub_commands or {})
        for name, spec in (extra.sub_commands or {}).items():
            current = sub_commands.get(name)
            sub_commands[name] = spec if current is None else merge_command_specs(current, spec)

    args: tuple[ArgPattern, ...] | None = None
    if base.args is not None or extra.args is not None:
        merged: list[ArgPattern] = []
        for pattern in (*_patterns_of(base), *_patterns_of(extra)):
            if pattern not in merged:
                merged.append(pattern)
        args = tuple(merged)

    return CommandSpec(
        sub_commands=sub_commands,
        args=args,
        allow_all=base.allow_all or extra.allow_all,
    )


def merge_command_permissions(
    *configs: Mapping[str, CommandSpec | Mapping[str, Any]],
) -> dict[str, CommandSpec]:
    """Deep-merge allowlists; earlier configs keep pattern precedence."""
    merged: dict[str, CommandSpec] = {}
    for config in configs:
        for executable, spec in load_command_permissions(config).items():
            current = merged.get(executable)
            merged[executable] = spec if current is None else merge_command_specs(current, spec)
    return merged


__all__ = [
    "AnyArg",
    "ArgPattern",
    "ArgSpec",
    "CommandPermissions",
    "CommandSpec",
    "FileArg",
    "GroupArg",
    "LiteralArg",
    "PatternArg",
    "PermissionConfigError",
    "RestAnyArg",
    "RestFilesArg",
    "check_pattern_structure",
    "coerce_arg_spec",
    "load_command_permissions",
    "load_command_spec",
    "merge_command_permissions",
    "merge_command_specs",
]
