"""Tests for the demo application."""

import pytest

import replkit.cli as cli_module
from replkit.cli import DivideByZeroError, build_demo_repl
from replkit.config import RunLine
from replkit.errors import ReplError

from conftest import ScriptedEditor


def _run(repl, lines, capsys):
    repl.run(ScriptedEditor(lines))
    return capsys.readouterr()


class TestDemoRepl:
    """Commands of the demo REPL."""

    def test_list_commands(self, capsys):
        repl = build_demo_repl()

        captured = _run(repl, ["append b", "prepend a", "append c"], capsys)

        assert captured.out.splitlines()[-1] == "a, b, c"

    def test_hello_and_greeting_choice(self, capsys):
        captured = _run(build_demo_repl(), ["hello World", "hello you -g hey"], capsys)

        assert "Hello, World" in captured.out
        assert "Hey, you" in captured.out

    def test_add(self, capsys):
        captured = _run(build_demo_repl(), ["add 2 40", "add x 1"], capsys)

        assert "42" in captured.out
        assert "Both operands must be integers" in captured.err

    def test_divide_by_zero_custom_error(self, capsys):
        captured = _run(build_demo_repl(), ["divide 1 0", "divide 9 3"], capsys)

        assert "Whoops, divided by zero!" in captured.err
        assert "3.0" in captured.out

    def test_divide_error_is_repl_error(self):
        assert isinstance(DivideByZeroError(), ReplError)

    def test_prompt_counts_commands(self):
        repl = build_demo_repl(name="count")
        editor = ScriptedEditor(["hello a", "clear"])

        repl.run(editor)

        assert editor.prompts == ["count> ", "count [1]> ", "count [2]> "]

    def test_ctrl_g_bound(self):
        repl = build_demo_repl()

        assert repl.config.find_keybinding("c-g") == RunLine("hello Friend")

    def test_async_mode_registers_async_hello(self):
        repl = build_demo_repl(use_async=True)

        assert repl.registry.lookup("hello").is_async is True


class TestMain:
    """Argument handling of the demo entry point."""

    def test_runs_blocking_loop(self, monkeypatch):
        seen = {}

        def fake_run(self, editor=None):
            seen["name"] = self.config.name

        monkeypatch.setattr(cli_module.Repl, "run", fake_run)

        cli_module.main(["--name", "mine"])

        assert seen == {"name": "mine"}

    def test_runs_async_loop(self, monkeypatch):
        seen = []

        async def fake_run_async(self, editor=None):
            seen.append(self.registry.lookup("hello").is_async)

        monkeypatch.setattr(cli_module.Repl, "run_async", fake_run_async)

        cli_module.main(["--async"])

        assert seen == [True]

    def test_log_file_configured(self, monkeypatch, tmp_path):
        log_calls = []
        monkeypatch.setattr(cli_module, "setup_logging", log_calls.append)
        monkeypatch.setattr(cli_module.Repl, "run", lambda self, editor=None: None)

        cli_module.main(["--log", str(tmp_path / "demo.log")])

        assert log_calls == [str(tmp_path / "demo.log")]

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            cli_module.main(["--version"])

        assert "replkit" in capsys.readouterr().out
