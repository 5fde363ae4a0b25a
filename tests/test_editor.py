"""Tests for the prompt_toolkit line editor adapters."""

from types import SimpleNamespace

import pytest
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import DummyOutput

from replkit.completion import CommandCompleter
from replkit.config import EditBuffer, KeyBinding, OpenCompletionMenu, ReplConfig, RunLine
from replkit.editor import (
    BoundedFileHistory,
    CommandLexer,
    LineSignal,
    LineSignalKind,
    PromptToolkitEditor,
    ReplCompleter,
    build_history,
    build_key_bindings,
)
from replkit.prompt import PromptState


def _completions(completer, text):
    document = Document(text, cursor_position=len(text))
    return list(completer.get_completions(document, CompleteEvent(completion_requested=True)))


def _event(buffer):
    return SimpleNamespace(current_buffer=buffer)


def _handler_for(key_bindings, key):
    for binding in key_bindings.bindings:
        if binding.keys == (key,):
            return binding.handler
    raise AssertionError(f"No binding for {key}")


class TestLineSignal:
    def test_constructors(self):
        assert LineSignal.success("x") == LineSignal(LineSignalKind.SUCCESS, "x")
        assert LineSignal.interrupt().kind is LineSignalKind.INTERRUPT
        assert LineSignal.end_of_input().kind is LineSignalKind.END_OF_INPUT


class TestReplCompleter:
    """Suggestions become prompt_toolkit completions."""

    def test_command_names(self, registry):
        completions = _completions(ReplCompleter(CommandCompleter(registry)), "he")

        assert [c.text for c in completions] == ["hello ", "help "]
        assert [c.display_text for c in completions] == ["hello", "help"]
        assert completions[0].start_position == -2
        assert completions[0].display_meta_text == "Greetings!"

    def test_flag_completion_replaces_partial_token(self, registry):
        completions = _completions(ReplCompleter(CommandCompleter(registry)), "hello --g")

        assert [c.text for c in completions] == ["--greeting "]
        assert completions[0].start_position == -3


class TestCommandLexer:
    """Known command words are highlighted."""

    def test_valid_command_highlighted(self):
        lexer = CommandLexer(lambda: ["hello"])

        fragments = lexer.lex_document(Document("hello world"))(0)

        assert fragments == [("class:command.valid", "hello"), ("", " world")]

    def test_unknown_command_plain(self):
        lexer = CommandLexer(lambda: ["hello"])

        fragments = lexer.lex_document(Document("  nope"))(0)

        assert fragments == [("", "  "), ("", "nope")]

    def test_names_read_on_each_lex(self):
        names = []
        lexer = CommandLexer(lambda: names)
        names.append("late")

        assert lexer.lex_document(Document("late"))(0) == [("class:command.valid", "late")]

    def test_missing_line_is_empty(self):
        lexer = CommandLexer(lambda: [])

        assert lexer.lex_document(Document(""))(3) == []


class TestKeyBindings:
    """The keybinding table is translated to prompt_toolkit bindings."""

    def test_default_table_binds_tab(self):
        key_bindings = build_key_bindings(ReplConfig().keybindings)

        assert [b.keys for b in key_bindings.bindings] == [(Keys.Tab,)]

    def test_quick_completion_inserts_single_match(self, registry):
        key_bindings = build_key_bindings(ReplConfig().keybindings, quick_completions=True)
        buffer = Buffer(
            completer=ReplCompleter(CommandCompleter(registry)),
            document=Document("ad", 2),
        )

        _handler_for(key_bindings, Keys.Tab)(_event(buffer))

        assert buffer.text == "add "

    def test_partial_completion_inserts_common_prefix(self, registry):
        key_bindings = build_key_bindings(
            ReplConfig().keybindings, quick_completions=True, partial_completions=True
        )
        buffer = Buffer(
            completer=ReplCompleter(CommandCompleter(registry)),
            document=Document("he", 2),
        )

        _handler_for(key_bindings, Keys.Tab)(_event(buffer))

        assert buffer.text == "hel"

    def test_no_completions_leaves_buffer(self, registry):
        key_bindings = build_key_bindings(ReplConfig().keybindings)
        buffer = Buffer(
            completer=ReplCompleter(CommandCompleter(registry)),
            document=Document("zz", 2),
        )

        _handler_for(key_bindings, Keys.Tab)(_event(buffer))

        assert buffer.text == "zz"

    def test_run_line_submits_text(self):
        submitted = []
        config = ReplConfig().with_keybinding("c-g", RunLine("hello Friend"))
        key_bindings = build_key_bindings(config.keybindings)
        buffer = Buffer(accept_handler=lambda b: submitted.append(b.text))

        _handler_for(key_bindings, Keys.ControlG)(_event(buffer))

        assert submitted == ["hello Friend"]

    def test_edit_buffer_action(self):
        config = ReplConfig().with_keybinding("c-u", EditBuffer(lambda b: b.insert_text("!")))
        key_bindings = build_key_bindings(config.keybindings)
        buffer = Buffer(document=Document("hi", 2))

        _handler_for(key_bindings, Keys.ControlU)(_event(buffer))

        assert buffer.text == "hi!"

    def test_unsupported_action_rejected(self):
        with pytest.raises(TypeError, match="Unsupported key action"):
            build_key_bindings([KeyBinding(("c-x",), "not an action")])

    def test_open_menu_action_type(self):
        assert ReplConfig().find_keybinding("tab") == OpenCompletionMenu()


class TestHistory:
    """History selection and capacity bounds."""

    def test_in_memory_without_file(self):
        assert isinstance(build_history(ReplConfig()), InMemoryHistory)

    def test_file_history_creates_parent(self, tmp_path):
        path = tmp_path / "nested" / "history"

        history = build_history(ReplConfig(history_file=path))

        assert type(history) is FileHistory
        assert path.parent.is_dir()

    def test_bounded_history_loads_newest_entries(self, tmp_path):
        path = tmp_path / "history"
        writer = BoundedFileHistory(str(path), capacity=10)
        for line in ["a", "b", "c", "d", "e"]:
            writer.store_string(line)

        history = build_history(ReplConfig(history_file=path, history_capacity=2))

        assert isinstance(history, BoundedFileHistory)
        assert list(history.load_history_strings()) == ["e", "d"]

    def test_bounded_history_trims_file(self, tmp_path):
        """Entries past capacity are dropped from the file on load."""
        path = tmp_path / "history"
        history = BoundedFileHistory(str(path), capacity=2)
        for line in ["a", "b", "c", "d", "e"]:
            history.store_string(line)

        list(history.load_history_strings())

        assert list(FileHistory(str(path)).load_history_strings()) == ["e", "d"]
        assert "+a" not in path.read_text()

    def test_bounded_history_within_capacity_untouched(self, tmp_path):
        path = tmp_path / "history"
        history = BoundedFileHistory(str(path), capacity=5)
        for line in ["a", "b"]:
            history.store_string(line)
        before = path.read_text()

        assert list(history.load_history_strings()) == ["b", "a"]
        assert path.read_text() == before


class TestPromptToolkitEditor:
    """End-to-end reads through pipe input."""

    @pytest.fixture
    def pipe_input(self):
        with create_pipe_input() as pipe_input:
            yield pipe_input

    def _editor(self, registry, pipe_input, config=None):
        return PromptToolkitEditor(
            config or ReplConfig(hints_enabled=False),
            registry,
            input=pipe_input,
            output=DummyOutput(),
        )

    def test_reads_line(self, registry, pipe_input):
        pipe_input.send_text("hello world\r")

        signal = self._editor(registry, pipe_input).read_line(PromptState("> "))

        assert signal == LineSignal.success("hello world")

    def test_ctrl_d_is_end_of_input(self, registry, pipe_input):
        pipe_input.send_text("\x04")

        signal = self._editor(registry, pipe_input).read_line(PromptState("> "))

        assert signal.kind is LineSignalKind.END_OF_INPUT

    def test_ctrl_c_is_interrupt(self, registry, pipe_input):
        pipe_input.send_text("\x03")

        signal = self._editor(registry, pipe_input).read_line(PromptState("> "))

        assert signal.kind is LineSignalKind.INTERRUPT

    def test_tab_completes_single_command(self, registry, pipe_input):
        pipe_input.send_text("ad\t1 2\r")

        signal = self._editor(registry, pipe_input).read_line(PromptState("> "))

        assert signal.text == "add 1 2"

    def test_run_line_binding(self, registry, pipe_input):
        config = ReplConfig(hints_enabled=False).with_keybinding("c-g", RunLine("hello Friend"))
        pipe_input.send_text("\x07")

        signal = self._editor(registry, pipe_input, config).read_line(PromptState("> "))

        assert signal == LineSignal.success("hello Friend")

    @pytest.mark.asyncio
    async def test_read_line_async(self, registry, pipe_input):
        pipe_input.send_text("add 1 2\r")

        signal = await self._editor(registry, pipe_input).read_line_async(PromptState("> "))

        assert signal == LineSignal.success("add 1 2")
