"""Tests for the completion engine."""

import pytest

from replkit.command import Command, CommandDefinition, SyncCallback
from replkit.completion import CommandCompleter, Suggestion
from replkit.parameter import Parameter
from replkit.registry import CommandRegistry


def _texts(suggestions):
    return [s.text for s in suggestions]


def _register(registry, command):
    registry.register(CommandDefinition(command, SyncCallback(lambda args, ctx: None)))


@pytest.fixture
def completer(registry):
    return CommandCompleter(registry)


class TestCommandNameCompletion:
    """Completing the first word of the line."""

    def test_prefix_matches_registered_and_builtin_help(self, completer):
        suggestions = completer.complete("he")

        assert _texts(suggestions) == ["hello", "help"]
        assert suggestions[0] == Suggestion(
            text="hello", description="Greetings!", span=(0, 2), append_trailing_space=True
        )

    def test_non_matching_commands_excluded(self, completer):
        assert "add" not in _texts(completer.complete("he"))

    def test_empty_line_lists_everything(self, completer):
        assert _texts(completer.complete("")) == ["add", "hello", "help"]

    def test_exit_is_not_suggested(self, completer):
        assert completer.complete("ex") == []

    def test_leading_whitespace_shifts_span(self, completer):
        suggestions = completer.complete("  ad")

        assert _texts(suggestions) == ["add"]
        assert suggestions[0].span == (2, 4)

    def test_matching_is_case_sensitive(self, completer):
        assert completer.complete("HE") == []

    def test_registered_help_listed_once(self, registry):
        _register(registry, Command("help", help="Custom help"))

        suggestions = CommandCompleter(registry).complete("hel")

        assert _texts(suggestions) == ["hello", "help"]
        assert suggestions[1].description == "Custom help"

    def test_sees_commands_registered_later(self, registry, completer):
        _register(registry, Command("hexdump"))

        assert "hexdump" in _texts(completer.complete("he"))


class TestParameterCompletion:
    """Completing arguments of a known command."""

    def test_long_flag_prefix(self):
        registry = CommandRegistry()
        _register(registry, Command("hello", (Parameter("who", long="who", help="Who"),)))

        suggestions = CommandCompleter(registry).complete("hello --w")

        assert _texts(suggestions) == ["--who"]
        assert suggestions[0].span == (6, 9)
        assert suggestions[0].description == "Who"

    def test_dash_offers_long_and_short(self, completer):
        assert _texts(completer.complete("hello -")) == ["--greeting", "-g"]

    def test_allowed_values_for_positional_index(self):
        registry = CommandRegistry()
        mode = Parameter("mode").add_allowed_value("fast", "Quick").add_allowed_value("slow")
        _register(registry, Command("run", (mode,)))

        suggestions = CommandCompleter(registry).complete("run f")

        assert _texts(suggestions) == ["fast"]
        assert suggestions[0].description == "Quick"
        assert suggestions[0].span == (4, 5)

    def test_trailing_space_uses_empty_prefix(self):
        registry = CommandRegistry()
        mode = Parameter("mode").add_allowed_value("fast").add_allowed_value("slow")
        _register(registry, Command("run", (mode,)))

        suggestions = CommandCompleter(registry).complete("run ")

        assert _texts(suggestions) == ["fast", "slow"]
        assert all(s.span == (4, 4) for s in suggestions)

    def test_index_beyond_positionals_still_offers_flags(self, completer):
        assert _texts(completer.complete("hello world ")) == ["--greeting", "-g"]

    def test_flag_values_after_long_flag(self):
        registry = CommandRegistry()
        greeting = (
            Parameter("greeting", long="greeting", short="g", help="Greeting word")
            .add_allowed_value("hello", "Neutral")
            .add_allowed_value("hi")
            .add_allowed_value("hey")
        )
        _register(registry, Command("hello", (Parameter("who"), greeting)))

        suggestions = CommandCompleter(registry).complete("hello bob --greeting h")

        assert _texts(suggestions) == ["hello", "hi", "hey"]
        assert suggestions[0].description == "Neutral"
        assert suggestions[0].span == (21, 22)

    def test_flag_values_after_short_flag_alongside_flags(self, completer):
        assert _texts(completer.complete("hello bob -g ")) == ["hello", "hi", "--greeting", "-g"]

    def test_flag_and_value_do_not_shift_positional_index(self):
        registry = CommandRegistry()
        mode = Parameter("mode").add_allowed_value("fast").add_allowed_value("slow")
        level = Parameter("level", long="level").add_allowed_value("1")
        _register(registry, Command("run", (mode, level)))

        assert _texts(CommandCompleter(registry).complete("run --level 1 s")) == ["slow"]

    def test_unknown_command_yields_nothing(self, completer):
        assert completer.complete("nope --") == []

    def test_cursor_in_middle_uses_text_before_cursor(self, completer):
        suggestions = completer.complete("he world", cursor=2)

        assert _texts(suggestions) == ["hello", "help"]
        assert suggestions[0].span == (0, 2)

    def test_help_completes_command_names(self, completer):
        assert _texts(completer.complete("help h")) == ["hello"]
        assert completer.complete("help hello ") == []

    def test_adjacent_duplicates_collapsed(self):
        registry = CommandRegistry()
        mode = Parameter("mode").add_allowed_value("--x")
        _register(registry, Command("run", (mode, Parameter("x", long="x"))))

        assert _texts(CommandCompleter(registry).complete("run --")) == ["--x"]
