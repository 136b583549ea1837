"""Tokenizer for the subset of shell syntax the permission engine understands.

The lexer produces a flat stream of ``word``, ``operator``, ``redirect`` and
``eof`` tokens. Anything whose meaning depends on runtime state (expansions,
substitutions, subshells, background jobs) is rejected eagerly with a
``LexerError`` instead of being approximated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class ShellSyntaxError(Exception):
    """Base class for input the bash front-end cannot understand."""


class LexerError(ShellSyntaxError):
    """Raised when the command string uses unsupported or malformed syntax."""


class TokenType(str, Enum):
    WORD = "word"
    OPERATOR = "operator"
    REDIRECT = "redirect"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    value: str


OPERATORS: tuple[str, ...] = ("&&", "||", "|", ";")

# fd-to-fd redirections such as 2>&1 or >&2
FD_REDIRECT_PATTERN = re.compile(r"\d*>&\d+")
# file redirections such as >file, >>file, 2>/dev/null, <file
FILE_REDIRECT_PATTERN = re.compile(r"\d*>>?|\d*<(?!&)")

# $name, positional ($1) and special ($@ $? $$ ...) parameters
_VARIABLE_START = re.compile(r"\$[A-Za-z_0-9@*#?$!-]")
_GLOB_CHARS = frozenset("*?[")
_DOUBLE_QUOTE_ESCAPABLE = frozenset('"\\$`\n')


class Lexer:
    """Single-use tokenizer over one command string."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            if self._text[self._pos] == "\n":
                # Each line runs as its own command.
                self._pos += 1
                tokens.append(Token(TokenType.OPERATOR, ";"))
                continue
            token = self._next_token()
            if token is not None:
                tokens.append(token)
        tokens.append(Token(TokenType.EOF, ""))
        return tokens

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _remaining(self) -> str:
        return self._text[self._pos :]

    def _skip_whitespace(self) -> None:
        while not self._at_end():
            char = self._text[self._pos]
            if char == "\n" or not char.isspace():
                return
            self._pos += 1

    def _next_token(self) -> Token | None:
        self._check_unsupported()

        operator = self._match_operator()
        if operator is not None:
            return Token(TokenType.OPERATOR, operator)

        redirect = self._match_redirect()
        if redirect is not None:
            return Token(TokenType.REDIRECT, redirect)

        word = self._parse_word()
        if word is not None:
            return Token(TokenType.WORD, word)
        return None

    def _check_unsupported(self) -> None:
        remaining = self._remaining()

        if remaining.startswith(("$((", "$[")):
            raise LexerError("Arithmetic expansion is not supported")
        if remaining.startswith(("$'", '$"')):
            raise LexerError("ANSI-C and locale quoting ($'...', $\"...\") are not supported")
        if remaining.startswith("$("):
            raise LexerError("Command substitution $() is not supported")
        if remaining.startswith("`"):
            raise LexerError("Command substitution with backticks is not supported")
        if remaining.startswith("<(") or remaining.startswith(">("):
            raise LexerError("Process substitution is not supported")
        if remaining.startswith("("):
            raise LexerError("Subshells are not supported")
        if remaining.startswith("{"):
            raise LexerError("Brace groups are not supported")
        if _VARIABLE_START.match(remaining) or remaining.startswith("${"):
            raise LexerError("Variable expansion is not supported")

    def _match_operator(self) -> str | None:
        for op in OPERATORS:
            if self._text.startswith(op, self._pos):
                self._pos += len(op)
                return op
        return None

    def _is_operator_start(self) -> bool:
        return any(self._text.startswith(op, self._pos) for op in OPERATORS)

    def _is_redirect_start(self) -> bool:
        return bool(
            FD_REDIRECT_PATTERN.match(self._text, self._pos)
            or FILE_REDIRECT_PATTERN.match(self._text, self._pos)
        )

    def _match_redirect(self) -> str | None:
        fd_match = FD_REDIRECT_PATTERN.match(self._text, self._pos)
        if fd_match:
            self._pos = fd_match.end()
            return fd_match.group(0)

        file_match = FILE_REDIRECT_PATTERN.match(self._text, self._pos)
        if not file_match:
            return None

        operator = file_match.group(0)
        self._pos = file_match.end()
        self._skip_whitespace()
        target = self._parse_word()
        if target is None:
            raise LexerError(f"Expected redirect target after {operator}")
        return operator + target

    def _parse_word(self) -> str | None:
        parts: list[str] = []

        while not self._at_end():
            char = self._text[self._pos]

            if char.isspace():
                break
            if self._is_operator_start() or self._is_redirect_start():
                break

            if char == "'":
                parts.append(self._parse_single_quoted())
            elif char == '"':
                parts.append(self._parse_double_quoted())
            elif char == "\\":
                parts.append(self._parse_escape())
            else:
                self._check_unsupported()
                if char == "&":
                    raise LexerError("Background execution with & is not supported")
                if char in _GLOB_CHARS:
                    raise LexerError(f"Unquoted glob character {char!r} is not supported")
                parts.append(char)
                self._pos += 1

        word = "".join(parts)
        return word or None

    def _parse_single_quoted(self) -> str:
        self._pos += 1
        end = self._text.find("'", self._pos)
        if end == -1:
            raise LexerError("Unterminated single quote")
        value = self._text[self._pos : end]
        self._pos = end + 1
        return value

    def _parse_double_quoted(self) -> str:
        self._pos += 1
        parts: list[str] = []

        while not self._at_end():
            char = self._text[self._pos]

            if char == '"':
                self._pos += 1
                return "".join(parts)

            if char == "\\":
                self._pos += 1
                if self._at_end():
                    raise LexerError("Unterminated escape sequence")
                escaped = self._text[self._pos]
                if escaped in _DOUBLE_QUOTE_ESCAPABLE:
                    parts.append(escaped)
                else:
                    parts.append("\\" + escaped)
                self._pos += 1
                continue

            if char == "$":
                remaining = self._remaining()
                if _VARIABLE_START.match(remaining) or remaining.startswith(("${", "$(", "$[")):
                    raise LexerError(
                        "Variable/command expansion in double quotes is not supported"
                    )

            if char == "`":
                raise LexerError("Command substitution with backticks is not supported")

            parts.append(char)
            self._pos += 1

        raise LexerError("Unterminated double quote")

    def _parse_escape(self) -> str:
        self._pos += 1
        if self._at_end():
            # trailing backslash is a line continuation with nothing after it
            return ""
        char = self._text[self._pos]
        self._pos += 1
        if char == "\n":
            return ""
        return char


def tokenize(text: str) -> list[Token]:
    """Tokenize ``text`` into words, operators and redirects, ending with ``eof``."""
    return Lexer(text).tokenize()


__all__ = [
    "FD_REDIRECT_PATTERN",
    "FILE_REDIRECT_PATTERN",
    "Lexer",
    "LexerError",
    "OPERATORS",
    "ShellSyntaxError",
    "Token",
    "TokenType",
    "tokenize",
]
