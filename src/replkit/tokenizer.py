"""Split raw input lines into a command name and argument tokens."""

from __future__ import annotations

import shlex
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ParsedLine:
    command_name: str
    tokens: tuple[str, ...]


def split_tokens(line: str) -> list[str]:
    """Shell-like split that never fails.

    Double quotes group words and are stripped. An unterminated quote or a
    dangling escape keeps whatever was read so far as the final token.
    """
    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.quotes = '"'

    parts: list[str] = []
    while True:
        try:
            token = lexer.get_token()
        except ValueError:
            # shlex keeps the partial token in its buffer on EOF errors.
            if lexer.token:
                parts.append(lexer.token)
            break
        if token is None:
            break
        parts.append(token)
    return parts


def tokenize(line: str) -> ParsedLine | None:
    """Return the parsed line, or None for empty or whitespace-only input."""
    parts = split_tokens(line)
    if not parts:
        return None
    return ParsedLine(command_name=parts[0], tokens=tuple(parts[1:]))
