"""Error taxonomy for replkit."""

from __future__ import annotations


class ReplError(Exception):
    """Base class for errors raised by the engine itself."""


class UnknownCommandError(ReplError):
    """Dispatch could not resolve a non-built-in command."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown command: {name}")


class IllegalRequiredError(ReplError):
    """A parameter was marked required after a default was set."""

    def __init__(self, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(
            f"Parameter '{parameter}' has a default and cannot be made required."
        )


class IllegalDefaultError(ReplError):
    """A default was set on a required parameter."""

    def __init__(self, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(
            f"Parameter '{parameter}' is required and cannot have a default."
        )
