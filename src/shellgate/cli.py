from __future__ import annotations

import json
import logging
import pathlib
from typing import Optional

import typer

from shellgate.bash import ShellSyntaxError, parse, tokenize
from shellgate.sandbox import ShellSandbox
from shellgate.settings import get_guard_settings

app = typer.Typer(no_args_is_help=True, help="Validate shell commands against an allowlist")


def _configure_logging() -> None:
    settings = get_guard_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


@app.command("check")
def check_command(
    command: str = typer.Argument(..., help="Shell command line to validate"),
    cwd: pathlib.Path = typer.Option(
        pathlib.Path("."), "--cwd", help="Project root the command runs in"
    ),
    skills_path: Optional[list[str]] = typer.Option(
        None, "--skills-path", help="Skills directory whose scripts may run (repeatable)"
    ),
    no_builtins: bool = typer.Option(
        False, "--no-builtins", help="Start from an empty allowlist, overriding SHELLGATE_INCLUDE_BUILTINS"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output machine readable JSON"),
) -> None:
    """Check COMMAND and exit with status 1 when it is denied."""
    _configure_logging()
    sandbox = ShellSandbox.from_settings(
        cwd,
        include_builtins=False if no_builtins else None,
        skills_paths=skills_path,
    )
    result = sandbox.check(command)

    if json_output:
        payload = {"command": command, "allowed": result.allowed, "reason": result.reason}
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=True))
    elif result.allowed:
        typer.echo("allowed")
    else:
        typer.echo(f"denied: {result.reason}")

    if not result.allowed:
        raise typer.Exit(1)


@app.command("tokens")
def show_tokens(command: str = typer.Argument(..., help="Shell command line to tokenize")) -> None:
    """Print the token stream for COMMAND."""
    try:
        tokens = tokenize(command)
    except ShellSyntaxError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    for token in tokens:
        typer.echo(f"{token.type.value}\t{token.value}")


@app.command("parse")
def show_parse(command: str = typer.Argument(..., help="Shell command line to parse")) -> None:
    """Print the parsed commands of COMMAND as JSON."""
    try:
        parsed = parse(command)
    except ShellSyntaxError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    payload = [
        {
            "executable": item.executable,
            "args": item.args,
            "receiving_pipe": item.receiving_pipe,
            "file_redirects": [
                {"target": redirect.target, "direction": redirect.direction}
                for redirect in item.file_redirects
            ],
        }
        for item in parsed
    ]
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=True))


if __name__ == "__main__":
    app()
