"""Command parameter schema entries."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .errors import IllegalDefaultError, IllegalRequiredError


@dataclass(frozen=True, slots=True)
class Parameter:
    """One argument of a command.

    A parameter with neither ``long`` nor ``short`` is positional; otherwise
    it is bound from ``--long`` / ``-s`` flags. Builder methods return new
    instances, so a parameter can be shared between commands.
    """

    name: str
    required: bool = False
    default: str | None = None
    help: str | None = None
    allowed_values: tuple[tuple[str, str | None], ...] = ()
    long: str | None = None
    short: str | None = None

    def __post_init__(self) -> None:
        if self.required and self.default is not None:
            raise IllegalDefaultError(self.name)
        if self.short is not None and len(self.short) != 1:
            raise ValueError(
                f"Short flag for parameter '{self.name}' must be one character."
            )

    @property
    def is_positional(self) -> bool:
        return self.long is None and self.short is None

    @property
    def flags(self) -> tuple[str, ...]:
        """Flag spellings in display order (long first)."""
        spellings = []
        if self.long is not None:
            spellings.append(f"--{self.long}")
        if self.short is not None:
            spellings.append(f"-{self.short}")
        return tuple(spellings)

    @property
    def allowed_value_names(self) -> tuple[str, ...]:
        return tuple(value for value, _ in self.allowed_values)

    def set_required(self, required: bool = True) -> Parameter:
        """Return a copy with ``required`` changed.

        Raises:
            IllegalRequiredError: If marking required while a default is set.
        """
        if required and self.default is not None:
            raise IllegalRequiredError(self.name)
        return replace(self, required=required)

    def set_default(self, default: str) -> Parameter:
        """Return a copy with a default value.

        Raises:
            IllegalDefaultError: If the parameter is required.
        """
        if self.required:
            raise IllegalDefaultError(self.name)
        return replace(self, default=default)

    def with_help(self, help_text: str) -> Parameter:
        return replace(self, help=help_text)

    def add_allowed_value(self, value: str, help_text: str | None = None) -> Parameter:
        """Return a copy accepting ``value``; re-adding a value replaces its help."""
        kept = tuple(item for item in self.allowed_values if item[0] != value)
        return replace(self, allowed_values=kept + ((value, help_text),))

    def with_long(self, long: str) -> Parameter:
        return replace(self, long=long)

    def with_short(self, short: str) -> Parameter:
        return replace(self, short=short)
