"""Help text rendering for the built-in ``help`` command."""

from __future__ import annotations

from .arguments import format_command_help
from .command import CommandDefinition
from .constants import (
    BUILTIN_EXIT,
    BUILTIN_EXIT_SUMMARY,
    BUILTIN_HELP,
    BUILTIN_HELP_SUMMARY,
)
from .registry import CommandRegistry


def _header(name: str, version: str, description: str) -> str:
    title = f"{name} {version}".strip()
    if description:
        return f"{title}: {description}"
    return title


def render_overview(
    registry: CommandRegistry,
    *,
    name: str,
    version: str = "",
    description: str = "",
) -> str:
    """Render the composite usage summary listing every command once."""
    rows = [(definition.name, definition.command.help or "") for definition in registry.all()]
    builtin_rows = [
        (command, summary)
        for command, summary in (
            (BUILTIN_HELP, BUILTIN_HELP_SUMMARY),
            (BUILTIN_EXIT, BUILTIN_EXIT_SUMMARY),
        )
        if command not in registry
    ]
    width = max((len(command) for command, _ in rows + builtin_rows), default=0)

    header = _header(name, version, description)
    lines = [header, "-" * len(header)]

    if rows:
        lines.append("Commands:")
        for command, summary in rows:
            lines.append(f"  {command.ljust(width)}  {summary}".rstrip())
        lines.append("")

    if builtin_rows:
        lines.append("Built-in:")
        for command, summary in builtin_rows:
            lines.append(f"  {command.ljust(width)}  {summary}")

    return "\n".join(lines).rstrip("\n")


def render_command_help(definition: CommandDefinition) -> str:
    """Render detailed usage for one command."""
    return format_command_help(definition.command)
