"""Argument binding on top of argparse.

Each ``Command`` schema is translated into an ``argparse.ArgumentParser``.
Parsing failures never exit the process: they surface as ``UsageError``
carrying the text argparse would have printed.
"""

from __future__ import annotations

import argparse
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, NoReturn

from .command import Command
from .parameter import Parameter


class UsageError(Exception):
    """Malformed command arguments; ``usage`` is printed as-is to the user."""

    def __init__(self, usage: str) -> None:
        self.usage = usage
        super().__init__(usage)


class ParsedArgs(Mapping[str, Any]):
    """Read-only view of bound argument values, keyed by parameter name."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParsedArgs({self._values!r})"


class HelpRequested(UsageError):
    """The tokens asked for the command's help (``-h`` or ``--help``)."""


class _CommandArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing or exiting."""

    def print_help(self, file: Any = None) -> NoReturn:
        raise HelpRequested(self.format_help().rstrip("\n"))

    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{self.format_usage()}{self.prog}: error: {message}")

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        raise UsageError(message or "")


def _add_parameter(parser: argparse.ArgumentParser, parameter: Parameter) -> None:
    kwargs: dict[str, Any] = {}
    if parameter.help:
        kwargs["help"] = parameter.help
    if parameter.allowed_values:
        kwargs["choices"] = list(parameter.allowed_value_names)

    if parameter.is_positional:
        if not parameter.required:
            kwargs["nargs"] = "?"
            kwargs["default"] = parameter.default
        parser.add_argument(parameter.name, **kwargs)
        return

    kwargs["dest"] = parameter.name
    kwargs["metavar"] = parameter.name.upper()
    if parameter.required:
        kwargs["required"] = True
    else:
        kwargs["default"] = parameter.default
    parser.add_argument(*parameter.flags, **kwargs)


def build_parser(command: Command) -> argparse.ArgumentParser:
    """Build the argparse parser for one command schema."""
    parser = _CommandArgumentParser(
        prog=command.name,
        description=command.help,
        allow_abbrev=False,
        conflict_handler="resolve",
    )
    for parameter in command.parameters:
        _add_parameter(parser, parameter)
    return parser


def bind(command: Command, tokens: Sequence[str]) -> ParsedArgs:
    """Bind argument tokens to ``command``'s schema.

    Raises:
        HelpRequested: If tokens ask for help; ``usage`` holds the help text.
        UsageError: If tokens do not satisfy the schema.
    """
    namespace = build_parser(command).parse_args(list(tokens))
    return ParsedArgs(vars(namespace))


def format_command_help(command: Command) -> str:
    """Detailed usage text for one command."""
    return build_parser(command).format_help().rstrip("\n")
