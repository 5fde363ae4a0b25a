"""Shared fixtures for replkit tests."""

from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass, field

import pytest

from replkit.command import Command, CommandDefinition, SyncCallback
from replkit.editor import LineSignal
from replkit.parameter import Parameter
from replkit.prompt import PromptState
from replkit.registry import CommandRegistry


@dataclass
class Context:
    """Mutable application context used across tests."""

    items: list[str] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)


class ScriptedEditor:
    """LineEditor fake that replays queued signals.

    Plain strings are submitted lines. Once the script runs out, every read
    reports end of input.
    """

    def __init__(self, script: Iterable[LineSignal | str] = ()) -> None:
        self._script = [
            LineSignal.success(item) if isinstance(item, str) else item for item in script
        ]
        self.prompts: list[str] = []

    def _next(self, prompt: PromptState) -> LineSignal:
        self.prompts.append(prompt.text)
        if not self._script:
            return LineSignal.end_of_input()
        return self._script.pop(0)

    def read_line(self, prompt: PromptState) -> LineSignal:
        return self._next(prompt)

    async def read_line_async(self, prompt: PromptState) -> LineSignal:
        return self._next(prompt)


@pytest.fixture
def context():
    """Fresh application context."""
    return Context()


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def err():
    return io.StringIO()


@pytest.fixture
def hello_command():
    """``hello <who>`` with an optional ``--greeting/-g`` flag."""
    return Command(
        "hello",
        (
            Parameter("who", help="Who to greet").set_required(),
            Parameter("greeting", long="greeting", short="g", help="Greeting word")
            .add_allowed_value("hello")
            .add_allowed_value("hi", "Casual")
            .set_default("hello"),
        ),
        help="Greetings!",
    )


@pytest.fixture
def registry(hello_command):
    """Registry holding ``hello`` and ``add``."""
    registry = CommandRegistry()
    registry.register(
        CommandDefinition(
            hello_command,
            SyncCallback(lambda args, ctx: f"{args['greeting']}, {args['who']}"),
        )
    )
    registry.register(
        CommandDefinition(
            Command(
                "add",
                (Parameter("first").set_required(), Parameter("second").set_required()),
                help="Add two numbers together",
            ),
            SyncCallback(lambda args, ctx: str(int(args["first"]) + int(args["second"]))),
        )
    )
    return registry
