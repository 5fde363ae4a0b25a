"""Immutable session configuration and the keybinding table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, TypeAlias

from .constants import DEFAULT_REPL_NAME, HINT_STYLE

KeySequence: TypeAlias = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class OpenCompletionMenu:
    """Show completions for the text before the cursor."""


@dataclass(frozen=True, slots=True)
class RunLine:
    """Submit ``text`` as if the user had typed it and pressed Enter."""

    text: str


@dataclass(frozen=True, slots=True)
class EditBuffer:
    """Apply ``handler`` to the prompt_toolkit buffer being edited."""

    handler: Callable[[Any], None]


KeyAction: TypeAlias = OpenCompletionMenu | RunLine | EditBuffer


@dataclass(frozen=True, slots=True)
class KeyBinding:
    """Key sequence (prompt_toolkit key names, e.g. ``("c-g",)``) to action."""

    keys: KeySequence
    action: KeyAction


def _normalize_keys(keys: str | KeySequence) -> KeySequence:
    if isinstance(keys, str):
        return (keys,)
    return tuple(keys)


DEFAULT_KEYBINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding(keys=("tab",), action=OpenCompletionMenu()),
)


@dataclass(frozen=True, slots=True)
class ReplConfig:
    """Settings fixed before the session loop starts.

    ``prompt=None`` derives ``"<name>> "`` in bold green. ``init_commands``
    run in the given order before interactive input is read.
    """

    name: str = DEFAULT_REPL_NAME
    version: str = ""
    description: str = ""
    banner: str | None = None
    prompt: str | None = None
    history_file: Path | None = None
    history_capacity: int | None = None
    keybindings: tuple[KeyBinding, ...] = DEFAULT_KEYBINDINGS
    quick_completions: bool = True
    partial_completions: bool = False
    hints_enabled: bool = True
    hint_style: str = HINT_STYLE
    stop_on_interrupt: bool = False
    stop_on_end_of_input: bool = True
    init_commands: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.history_capacity is not None and self.history_capacity <= 0:
            raise ValueError("history_capacity must be positive.")
        if self.history_file is not None and not isinstance(self.history_file, Path):
            object.__setattr__(self, "history_file", Path(self.history_file))
        if not isinstance(self.init_commands, tuple):
            object.__setattr__(self, "init_commands", tuple(self.init_commands))

    def with_keybinding(self, keys: str | KeySequence, action: KeyAction) -> ReplConfig:
        """Return a copy binding ``keys`` to ``action``, replacing any prior binding."""
        normalized = _normalize_keys(keys)
        kept = tuple(b for b in self.keybindings if b.keys != normalized)
        return replace(self, keybindings=kept + (KeyBinding(normalized, action),))

    def without_keybinding(self, keys: str | KeySequence) -> ReplConfig:
        normalized = _normalize_keys(keys)
        return replace(
            self,
            keybindings=tuple(b for b in self.keybindings if b.keys != normalized),
        )

    def find_keybinding(self, keys: str | KeySequence) -> KeyAction | None:
        normalized = _normalize_keys(keys)
        for binding in self.keybindings:
            if binding.keys == normalized:
                return binding.action
        return None
