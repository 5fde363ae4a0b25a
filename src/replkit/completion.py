"""Tab-completion suggestions over registered commands and their schemas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .command import Command
from .constants import BUILTIN_HELP, BUILTIN_HELP_SUMMARY
from .parameter import Parameter
from .registry import CommandRegistry


@dataclass(frozen=True, slots=True)
class Suggestion:
    """One completion candidate.

    ``span`` is the ``(start, end)`` range of the line replaced by ``text``.
    """

    text: str
    description: str | None
    span: tuple[int, int]
    append_trailing_space: bool = True


def _dedup_adjacent(suggestions: list[Suggestion]) -> list[Suggestion]:
    result: list[Suggestion] = []
    for suggestion in suggestions:
        if result and result[-1].text == suggestion.text:
            continue
        result.append(suggestion)
    return result


def _positional_index(completed: list[str], flag_owners: Mapping[str, Parameter]) -> int:
    """Count completed positional tokens, skipping flags and their values."""
    index = 0
    skip_value = False
    for token in completed:
        if skip_value:
            skip_value = False
        elif token in flag_owners:
            skip_value = True
        else:
            index += 1
    return index


class CommandCompleter:
    """Compute suggestions for a partial line.

    The registry is held by reference, so commands registered after the
    completer was built are still offered.
    """

    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry

    def complete(self, line: str, cursor: int | None = None) -> list[Suggestion]:
        if cursor is None:
            cursor = len(line)
        cursor = max(0, min(cursor, len(line)))

        head = line[:cursor]
        stripped = head.lstrip()
        offset = len(head) - len(stripped)

        if not any(ch.isspace() for ch in stripped):
            return _dedup_adjacent(self._commands_starting_with(stripped, offset, cursor))

        pieces = stripped.split()
        command_name = pieces[0]
        if stripped[-1].isspace():
            prefix = ""
            completed = pieces[1:]
        else:
            prefix = pieces[-1]
            completed = pieces[1:-1]
        start = cursor - len(prefix)

        definition = self._registry.lookup(command_name)
        if definition is not None:
            suggestions = self._parameter_suggestions(
                definition.command, completed, prefix, start, cursor
            )
        elif command_name == BUILTIN_HELP and not completed:
            suggestions = self._help_topics(prefix, start, cursor)
        else:
            return []
        return _dedup_adjacent(suggestions)

    def _commands_starting_with(self, prefix: str, start: int, end: int) -> list[Suggestion]:
        suggestions = [
            Suggestion(
                text=definition.name,
                description=definition.command.help,
                span=(start, end),
            )
            for definition in self._registry.all()
            if definition.name.startswith(prefix)
        ]
        if BUILTIN_HELP.startswith(prefix) and BUILTIN_HELP not in self._registry:
            suggestions.append(
                Suggestion(text=BUILTIN_HELP, description=BUILTIN_HELP_SUMMARY, span=(start, end))
            )
        suggestions.sort(key=lambda suggestion: suggestion.text)
        return suggestions

    def _help_topics(self, prefix: str, start: int, end: int) -> list[Suggestion]:
        return [
            Suggestion(text=name, description=None, span=(start, end))
            for name in self._registry.names()
            if name.startswith(prefix)
        ]

    def _parameter_suggestions(
        self,
        command: Command,
        completed: list[str],
        prefix: str,
        start: int,
        end: int,
    ) -> list[Suggestion]:
        suggestions: list[Suggestion] = []

        flag_owners = {
            spelling: parameter
            for parameter in command.flag_parameters
            for spelling in parameter.flags
        }
        if completed and completed[-1] in flag_owners:
            # Completing the value of the flag just typed.
            target: Parameter | None = flag_owners[completed[-1]]
        else:
            positional = command.positional_parameters
            index = _positional_index(completed, flag_owners)
            target = positional[index] if index < len(positional) else None

        if target is not None:
            for value, help_text in target.allowed_values:
                if value.startswith(prefix):
                    suggestions.append(
                        Suggestion(text=value, description=help_text, span=(start, end))
                    )

        for parameter in command.flag_parameters:
            for spelling in parameter.flags:
                if spelling.startswith(prefix):
                    suggestions.append(
                        Suggestion(text=spelling, description=parameter.help, span=(start, end))
                    )

        return suggestions
