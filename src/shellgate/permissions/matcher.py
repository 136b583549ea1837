"""Argument pattern matching against ``ArgSpec`` sequences."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from shellgate.permissions.gitignore import Gitignore
from shellgate.permissions.paths import AbsFilePath, is_path_safe
from shellgate.permissions.spec import (
    AnyArg,
    ArgSpec,
    FileArg,
    GroupArg,
    LiteralArg,
    PatternArg,
    RestAnyArg,
    RestFilesArg,
)


class PatternStructureError(ValueError):
    """Raised for patterns that can never be matched, e.g. ``restAny`` mid-pattern."""


@dataclass(frozen=True, slots=True)
class MatchContext:
    current_cwd: AbsFilePath | str
    project_cwd: AbsFilePath | str
    gitignore: Gitignore
    home_dir: str | None = None


@dataclass(frozen=True, slots=True)
class MatchFailure:
    """Why a spec did not match, and how far into the arguments it got."""

    reason: str
    position: int
    path_failure: bool = False


@dataclass(frozen=True, slots=True)
class MatchResult:
    matched: bool
    failure: MatchFailure | None = None

    @property
    def reason(self) -> str | None:
        return self.failure.reason if self.failure else None


def _check_file(args: Sequence[str], index: int, ctx: MatchContext) -> MatchFailure | None:
    # commands parse these as options, so path containment says nothing about them
    if args[index].startswith("-"):
        return MatchFailure(
            f'argument "{args[index]}" looks like an option, not a file path',
            index,
            path_failure=True,
        )
    check = is_path_safe(
        args[index],
        ctx.current_cwd,
        ctx.project_cwd,
        ctx.gitignore,
        home_dir=ctx.home_dir,
    )
    if check.safe:
        return None
    return MatchFailure(check.reason or "invalid file path", index, path_failure=True)


def match_single_spec(
    args: Sequence[str], index: int, spec: ArgSpec, ctx: MatchContext
) -> int | MatchFailure:
    """Match one spec at ``index``; returns the number of arguments consumed."""
    has_arg = index < len(args)
    match spec:
        case LiteralArg(value=value):
            if not has_arg or args[index] != value:
                return MatchFailure(f'expected argument "{value}"', index)
            return 1
        case FileArg():
            if not has_arg:
                return MatchFailure("expected file argument", index)
            failure = _check_file(args, index, ctx)
            return failure if failure is not None else 1
        case AnyArg():
            if not has_arg:
                return MatchFailure("expected argument", index)
            return 1
        case PatternArg():
            if not has_arg:
                return MatchFailure("expected argument matching pattern", index)
            if not spec.matches(args[index]):
                return MatchFailure(
                    f'argument "{args[index]}" does not match pattern "{spec.pattern}"', index
                )
            return 1
        case RestFilesArg():
            for position in range(index, len(args)):
                failure = _check_file(args, position, ctx)
                if failure is not None:
                    return failure
            return len(args) - index
        case RestAnyArg():
            return len(args) - index
        case GroupArg():
            return match_group(args, index, spec, ctx)
    raise PatternStructureError(f"unknown argument spec: {spec!r}")


def _reject_rest_in_group(spec: ArgSpec) -> None:
    if isinstance(spec, (RestFilesArg, RestAnyArg)):
        raise PatternStructureError(f"{spec.kind} not allowed inside group")


def match_group_sequential(
    args: Sequence[str], index: int, specs: Sequence[ArgSpec], ctx: MatchContext
) -> int | MatchFailure:
    cursor = index
    for spec in specs:
        _reject_rest_in_group(spec)
        result = match_single_spec(args, cursor, spec, ctx)
        if isinstance(result, MatchFailure):
            return result
        cursor += result
    return cursor - index


def match_group_any_order(
    args: Sequence[str], index: int, specs: Sequence[ArgSpec], ctx: MatchContext
) -> int | MatchFailure:
    """Greedily match specs in whatever order the arguments present them.

    A spec only counts as matched when it consumes at least one argument, so
    an optional inner group cannot loop forever on an empty match.
    """
    for spec in specs:
        _reject_rest_in_group(spec)

    pending = set(range(len(specs)))
    cursor = index
    while pending and cursor < len(args):
        for spec_index in sorted(pending):
            result = match_single_spec(args, cursor, specs[spec_index], ctx)
            if not isinstance(result, MatchFailure) and result > 0:
                cursor += result
                pending = pending - {spec_index}
                break
        else:
            break

    for spec_index in sorted(pending):
        spec = specs[spec_index]
        if isinstance(spec, GroupArg):
            if not spec.optional:
                return MatchFailure("required group not matched", cursor)
        else:
            return MatchFailure("required argument not matched", cursor)
    return cursor - index


def match_group(
    args: Sequence[str], index: int, group: GroupArg, ctx: MatchContext
) -> int | MatchFailure:
    if group.any_order:
        result = match_group_any_order(args, index, group.specs, ctx)
    else:
        result = match_group_sequential(args, index, group.specs, ctx)
    if isinstance(result, MatchFailure) and group.optional:
        return 0
    return result


def match_args_pattern(
    args: Sequence[str], pattern: Sequence[ArgSpec], ctx: MatchContext
) -> MatchResult:
    """Match ``args`` against ``pattern`` from a fresh cursor.

    Raises:
        PatternStructureError: if a rest spec is not in the final slot or
            appears inside a group.
    """
    last = len(pattern) - 1
    cursor = 0
    for slot, spec in enumerate(pattern):
        if isinstance(spec, (RestFilesArg, RestAnyArg)) and slot != last:
            raise PatternStructureError(f"{spec.kind} must be last in pattern")
        result = match_single_spec(args, cursor, spec, ctx)
        if isinstance(result, MatchFailure):
            return MatchResult(False, result)
        cursor += result

    if cursor < len(args):
        extra = " ".join(args[cursor:])
        return MatchResult(False, MatchFailure(f"unexpected extra arguments: {extra}", cursor))
    return MatchResult(True)


def more_specific(candidate: MatchFailure, current: MatchFailure | None) -> bool:
    """Whether ``candidate`` explains a mismatch better than ``current``.

    Failures further into the argument list win; at equal depth a path-safety
    failure wins, and otherwise the later pattern does.
    """
    if current is None or candidate.position > current.position:
        return True
    if candidate.position < current.position:
        return False
    return candidate.path_failure or not current.path_failure


__all__ = [
    "MatchContext",
    "MatchFailure",
    "MatchResult",
    "PatternStructureError",
    "match_args_pattern",
    "match_group",
    "match_group_any_order",
    "match_group_sequential",
    "match_single_spec",
    "more_specific",
]
