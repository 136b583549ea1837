"""Group a token stream into an ordered list of simple commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal, Sequence

from shellgate.bash.lexer import (
    FD_REDIRECT_PATTERN,
    ShellSyntaxError,
    Token,
    TokenType,
    tokenize,
)

RedirectDirection = Literal["input", "output"]


class ParserError(ShellSyntaxError):
    """Raised when tokens do not form a valid command sequence."""


@dataclass(frozen=True, slots=True)
class FileRedirect:
    target: str
    direction: RedirectDirection


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    """One simple command: executable, arguments and attached redirections."""

    executable: str
    args: list[str] = field(default_factory=list)
    receiving_pipe: bool = False
    file_redirects: list[FileRedirect] = field(default_factory=list)

    def display(self) -> str:
        return " ".join([self.executable, *self.args])


@dataclass(frozen=True, slots=True)
class ParsedCommandList:
    commands: list[ParsedCommand] = field(default_factory=list)

    def __iter__(self) -> Iterator[ParsedCommand]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)


def parse_redirect(value: str) -> FileRedirect | None:
    """Extract the file target of a redirect token; fd-to-fd redirects yield ``None``."""
    if FD_REDIRECT_PATTERN.fullmatch(value):
        return None

    stripped = value.lstrip("0123456789")
    if stripped.startswith(">>"):
        return FileRedirect(target=stripped[2:], direction="output")
    if stripped.startswith(">"):
        return FileRedirect(target=stripped[1:], direction="output")
    if stripped.startswith("<"):
        return FileRedirect(target=stripped[1:], direction="input")
    raise ParserError(f"Malformed redirect: {value}")


class Parser:
    """Splits tokens on operators into commands; the grammar has no nesting."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens = list(tokens)
        self._pos = 0

    def parse(self) -> ParsedCommandList:
        commands: list[ParsedCommand] = []
        last_operator: str | None = None

        while not self._at_end():
            if self._peek().type == TokenType.OPERATOR:
                last_operator = self._advance().value
                continue

            command = self._parse_command(receiving_pipe=last_operator == "|")
            if command is not None:
                commands.append(command)

            if not self._at_end() and self._peek().type == TokenType.OPERATOR:
                last_operator = self._advance().value
            else:
                last_operator = None

        return ParsedCommandList(commands=commands)

    def _parse_command(self, *, receiving_pipe: bool) -> ParsedCommand | None:
        redirects: list[FileRedirect] = []

        while not self._at_end() and self._peek().type == TokenType.REDIRECT:
            self._collect_redirect(self._advance(), redirects)

        if self._at_end() or self._peek().type == TokenType.OPERATOR:
            return None

        exec_token = self._peek()
        if exec_token.type != TokenType.WORD:
            kind = getattr(exec_token.type, "value", exec_token.type)
            raise ParserError(f"Expected command executable, got {kind}: {exec_token.value}")
        self._advance()

        args: list[str] = []
        while not self._at_end():
            token = self._peek()
            if token.type == TokenType.OPERATOR:
                break
            self._advance()
            if token.type == TokenType.WORD:
                args.append(token.value)
            elif token.type == TokenType.REDIRECT:
                self._collect_redirect(token, redirects)

        return ParsedCommand(
            executable=exec_token.value,
            args=args,
            receiving_pipe=receiving_pipe,
            file_redirects=redirects,
        )

    @staticmethod
    def _collect_redirect(token: Token, redirects: list[FileRedirect]) -> None:
        redirect = parse_redirect(token.value)
        if redirect is not None:
            redirects.append(redirect)

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _at_end(self) -> bool:
        return self._pos >= len(self._tokens) or self._tokens[self._pos].type == TokenType.EOF


def parse_tokens(tokens: Sequence[Token]) -> ParsedCommandList:
    """Parse an already tokenized command line."""
    return Parser(tokens).parse()


def parse(text: str) -> ParsedCommandList:
    """Tokenize and parse ``text`` in one step.

    Raises:
        LexerError: if the text uses unsupported shell syntax.
        ParserError: if the tokens do not form valid commands.
    """
    return parse_tokens(tokenize(text))


__all__ = [
    "FileRedirect",
    "ParsedCommand",
    "ParsedCommandList",
    "Parser",
    "ParserError",
    "RedirectDirection",
    "parse",
    "parse_redirect",
    "parse_tokens",
]
