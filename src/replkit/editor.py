"""Line-editor boundary: signals, the editor protocol and its prompt_toolkit implementation."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import (
    CompleteEvent,
    Completer,
    Completion,
    get_common_complete_suffix,
)
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.lexers import Lexer
from prompt_toolkit.styles import Style

from .completion import CommandCompleter
from .config import EditBuffer, KeyAction, KeyBinding, OpenCompletionMenu, ReplConfig, RunLine
from .constants import BUILTIN_COMMANDS, VALID_COMMAND_STYLE
from .prompt import PromptState
from .registry import CommandRegistry


class LineSignalKind(Enum):
    SUCCESS = "success"
    INTERRUPT = "interrupt"
    END_OF_INPUT = "end_of_input"


@dataclass(frozen=True, slots=True)
class LineSignal:
    """Result of one read: a line of text, Ctrl-C, or Ctrl-D."""

    kind: LineSignalKind
    text: str = ""

    @classmethod
    def success(cls, text: str) -> LineSignal:
        return cls(LineSignalKind.SUCCESS, text)

    @classmethod
    def interrupt(cls) -> LineSignal:
        return cls(LineSignalKind.INTERRUPT)

    @classmethod
    def end_of_input(cls) -> LineSignal:
        return cls(LineSignalKind.END_OF_INPUT)


class LineEditor(Protocol):
    def read_line(self, prompt: PromptState) -> LineSignal: ...

    async def read_line_async(self, prompt: PromptState) -> LineSignal: ...


# ============================================================================
# prompt_toolkit adapters
# ============================================================================


class ReplCompleter(Completer):
    """Expose ``CommandCompleter`` suggestions as prompt_toolkit completions."""

    def __init__(self, completer: CommandCompleter) -> None:
        self._completer = completer

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        cursor = document.cursor_position
        for suggestion in self._completer.complete(document.text, cursor):
            text = suggestion.text + (" " if suggestion.append_trailing_space else "")
            yield Completion(
                text,
                start_position=suggestion.span[0] - cursor,
                display=suggestion.text,
                display_meta=suggestion.description or "",
            )


class CommandLexer(Lexer):
    """Highlight the command word when it names a known command."""

    def __init__(self, valid_names: Callable[[], Iterable[str]]) -> None:
        self._valid_names = valid_names

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        valid = set(self._valid_names())

        def get_line(lineno: int) -> StyleAndTextTuples:
            try:
                line = lines[lineno]
            except IndexError:
                return []
            if lineno != 0:
                return [("", line)]

            stripped = line.lstrip()
            indent = line[: len(line) - len(stripped)]
            word = stripped.split(maxsplit=1)[0] if stripped else ""
            rest = stripped[len(word):]
            style = "class:command.valid" if word in valid else ""
            fragments: StyleAndTextTuples = []
            if indent:
                fragments.append(("", indent))
            if word:
                fragments.append((style, word))
            if rest:
                fragments.append(("", rest))
            return fragments

        return get_line


class BoundedFileHistory(FileHistory):
    """File history holding at most ``capacity`` of the newest entries.

    Older entries are dropped from the file itself when history is loaded.
    """

    def __init__(self, filename: str, capacity: int) -> None:
        self.capacity = capacity
        super().__init__(filename)

    def load_history_strings(self) -> Iterable[str]:
        # FileHistory yields newest first.
        entries = list(super().load_history_strings())
        if len(entries) <= self.capacity:
            return entries

        kept = entries[: self.capacity]
        Path(self.filename).write_bytes(b"")
        for entry in reversed(kept):
            self.store_string(entry)
        return kept


def build_history(config: ReplConfig) -> History:
    if config.history_file is None:
        return InMemoryHistory()

    history_file = Path(config.history_file).expanduser()
    history_file.parent.mkdir(parents=True, exist_ok=True)
    if config.history_capacity is not None:
        return BoundedFileHistory(str(history_file), config.history_capacity)
    return FileHistory(str(history_file))


def _open_completion_menu(event: Any, *, quick: bool, partial: bool) -> None:
    buffer = event.current_buffer
    if buffer.complete_state:
        buffer.complete_next()
        return

    completer = buffer.completer
    if completer is None:
        return

    document = buffer.document
    completions = list(
        completer.get_completions(document, CompleteEvent(completion_requested=True))
    )
    if not completions:
        return

    if quick and len(completions) == 1:
        buffer.apply_completion(completions[0])
        return

    if partial:
        common_suffix = get_common_complete_suffix(document, completions)
        if common_suffix:
            buffer.insert_text(common_suffix)
            return

    buffer.start_completion(select_first=False)


def _make_handler(action: KeyAction, *, quick: bool, partial: bool) -> Callable[[Any], None]:
    if isinstance(action, OpenCompletionMenu):

        def _handle_open_menu(event: Any) -> None:
            _open_completion_menu(event, quick=quick, partial=partial)

        return _handle_open_menu

    if isinstance(action, RunLine):

        def _handle_run_line(event: Any) -> None:
            buffer = event.current_buffer
            buffer.text = action.text
            buffer.validate_and_handle()

        return _handle_run_line

    if isinstance(action, EditBuffer):

        def _handle_edit(event: Any) -> None:
            action.handler(event.current_buffer)

        return _handle_edit

    raise TypeError(f"Unsupported key action: {action!r}")


def build_key_bindings(
    keybindings: Iterable[KeyBinding],
    *,
    quick_completions: bool = True,
    partial_completions: bool = False,
) -> KeyBindings:
    """Translate the keybinding table into prompt_toolkit key bindings."""
    key_bindings = KeyBindings()
    for binding in keybindings:
        handler = _make_handler(
            binding.action, quick=quick_completions, partial=partial_completions
        )
        key_bindings.add(*binding.keys, eager=True)(handler)
    return key_bindings


class PromptToolkitEditor:
    """``LineEditor`` backed by a prompt_toolkit ``PromptSession``."""

    def __init__(
        self,
        config: ReplConfig,
        registry: CommandRegistry,
        *,
        input: Any = None,
        output: Any = None,
    ) -> None:
        self.session: PromptSession[str] = PromptSession(
            completer=ReplCompleter(CommandCompleter(registry)),
            complete_while_typing=False,
            lexer=CommandLexer(lambda: [*registry.names(), *BUILTIN_COMMANDS]),
            auto_suggest=AutoSuggestFromHistory() if config.hints_enabled else None,
            history=build_history(config),
            key_bindings=build_key_bindings(
                config.keybindings,
                quick_completions=config.quick_completions,
                partial_completions=config.partial_completions,
            ),
            style=Style.from_dict(
                {
                    "auto-suggestion": config.hint_style,
                    "command.valid": VALID_COMMAND_STYLE,
                }
            ),
            input=input,
            output=output,
        )

    def read_line(self, prompt: PromptState) -> LineSignal:
        try:
            return LineSignal.success(self.session.prompt(prompt.formatted()))
        except KeyboardInterrupt:
            return LineSignal.interrupt()
        except EOFError:
            return LineSignal.end_of_input()

    async def read_line_async(self, prompt: PromptState) -> LineSignal:
        try:
            return LineSignal.success(await self.session.prompt_async(prompt.formatted()))
        except KeyboardInterrupt:
            return LineSignal.interrupt()
        except EOFError:
            return LineSignal.end_of_input()
