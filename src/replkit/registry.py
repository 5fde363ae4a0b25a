"""Command registry keyed by command name."""

from __future__ import annotations

from collections.abc import Iterator

from .command import CommandDefinition


class CommandRegistry:
    """Mapping of command name to definition.

    Registering a name that already exists replaces the previous definition.
    """

    def __init__(self) -> None:
        self._commands: dict[str, CommandDefinition] = {}

    def register(self, definition: CommandDefinition) -> None:
        self._commands[definition.name] = definition

    def lookup(self, name: str) -> CommandDefinition | None:
        return self._commands.get(name)

    def all(self) -> Iterator[CommandDefinition]:
        """Yield every definition once, sorted by name."""
        for name in sorted(self._commands):
            yield self._commands[name]

    def names(self) -> list[str]:
        return sorted(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)
