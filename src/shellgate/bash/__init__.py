"""Bash front-end: lexer and parser for the supported command subset."""

from shellgate.bash.lexer import Lexer, LexerError, ShellSyntaxError, Token, TokenType, tokenize
from shellgate.bash.parser import (
    FileRedirect,
    ParsedCommand,
    ParsedCommandList,
    Parser,
    ParserError,
    parse,
    parse_tokens,
)

__all__ = [
    "FileRedirect",
    "Lexer",
    "LexerError",
    "ParsedCommand",
    "ParsedCommandList",
    "Parser",
    "ParserError",
    "ShellSyntaxError",
    "Token",
    "TokenType",
    "parse",
    "parse_tokens",
    "tokenize",
]
