"""Command schemas, callback variants and registry entries."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

from .parameter import Parameter

SyncCommandFn: TypeAlias = Callable[[Mapping[str, Any], Any], "str | None"]
AsyncCommandFn: TypeAlias = Callable[[Mapping[str, Any], Any], Awaitable["str | None"]]


@dataclass(frozen=True, slots=True)
class Command:
    """Argument schema of one command."""

    name: str
    parameters: tuple[Parameter, ...] = ()
    help: str | None = None

    def __post_init__(self) -> None:
        if not self.name or any(ch.isspace() for ch in self.name):
            raise ValueError(f"Invalid command name: {self.name!r}")

        seen: set[str] = set()
        for parameter in self.parameters:
            if parameter.name in seen:
                raise ValueError(
                    f"Duplicate parameter '{parameter.name}' in command '{self.name}'."
                )
            seen.add(parameter.name)

    def with_parameter(self, parameter: Parameter) -> Command:
        return replace(self, parameters=self.parameters + (parameter,))

    def with_help(self, help_text: str) -> Command:
        return replace(self, help=help_text)

    @property
    def positional_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.is_positional)

    @property
    def flag_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if not p.is_positional)


@dataclass(frozen=True, slots=True)
class SyncCallback:
    """Blocking command callback."""

    fn: SyncCommandFn


@dataclass(frozen=True, slots=True)
class AsyncCallback:
    """Suspendable command callback (a coroutine function)."""

    fn: AsyncCommandFn


Callback: TypeAlias = SyncCallback | AsyncCallback


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    """A registered command: schema plus exactly one callback variant."""

    command: Command
    callback: Callback

    def __post_init__(self) -> None:
        if not isinstance(self.callback, (SyncCallback, AsyncCallback)):
            raise TypeError(
                f"Command '{self.command.name}' needs a SyncCallback or AsyncCallback."
            )

    @property
    def name(self) -> str:
        return self.command.name

    @property
    def is_async(self) -> bool:
        return isinstance(self.callback, AsyncCallback)
