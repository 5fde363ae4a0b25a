"""Demo application: python -m replkit."""

from __future__ import annotations

import argparse
import asyncio
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import __version__
from .command import Command
from .config import ReplConfig, RunLine
from .errors import ReplError
from .logging import setup_logging
from .parameter import Parameter
from .repl import Repl

DEMO_NAME = "demo"


@dataclass
class DemoContext:
    items: deque[str] = field(default_factory=deque)
    commands_run: int = 0


class DivideByZeroError(ReplError):
    def __init__(self) -> None:
        super().__init__("Whoops, divided by zero!")


def _append(args: Mapping[str, Any], context: DemoContext) -> str:
    context.items.append(args["name"])
    return ", ".join(context.items)


def _prepend(args: Mapping[str, Any], context: DemoContext) -> str:
    context.items.appendleft(args["name"])
    return ", ".join(context.items)


def _hello(args: Mapping[str, Any], _context: DemoContext) -> str:
    return f"{args['greeting'].capitalize()}, {args['who']}"


async def _hello_async(args: Mapping[str, Any], context: DemoContext) -> str:
    await asyncio.sleep(0)
    return _hello(args, context)


def _add(args: Mapping[str, Any], _context: DemoContext) -> str:
    try:
        first = int(args["first"])
        second = int(args["second"])
    except ValueError as e:
        raise ValueError(f"Both operands must be integers: {e}") from e
    return str(first + second)


def _divide(args: Mapping[str, Any], _context: DemoContext) -> str:
    numerator = float(args["numerator"])
    denominator = float(args["denominator"])
    if denominator == 0:
        raise DivideByZeroError()
    return str(numerator / denominator)


def _clear(_args: Mapping[str, Any], context: DemoContext) -> None:
    context.items.clear()


def build_demo_repl(
    *,
    name: str = DEMO_NAME,
    use_async: bool = False,
    history_file: Path | None = None,
) -> Repl[DemoContext]:
    """Assemble the demo REPL with its commands and key bindings."""
    config = ReplConfig(
        name=name,
        version=f"v{__version__}",
        description="replkit demo",
        banner=f"Welcome to {name}. Type 'help' for commands, 'exit' or Ctrl-D to quit.",
        history_file=history_file,
        history_capacity=500 if history_file else None,
    ).with_keybinding("c-g", RunLine("hello Friend"))

    who = Parameter("who", help="Who to greet").set_required()
    greeting = (
        Parameter("greeting", long="greeting", short="g", help="Greeting word")
        .add_allowed_value("hello", "Neutral")
        .add_allowed_value("hi", "Casual")
        .add_allowed_value("hey", "Very casual")
        .set_default("hello")
    )
    hello = Command("hello", (who, greeting), help="Greetings!")

    repl: Repl[DemoContext] = Repl(DemoContext(), config)
    repl.add_command(
        Command("append", help="Append name to end of list").with_parameter(
            Parameter("name").set_required()
        ),
        _append,
    )
    repl.add_command(
        Command("prepend", help="Prepend name to front of list").with_parameter(
            Parameter("name").set_required()
        ),
        _prepend,
    )
    repl.add_command(Command("clear", help="Empty the list"), _clear)
    repl.add_command(
        Command(
            "add",
            (Parameter("first").set_required(), Parameter("second").set_required()),
            help="Add two numbers together",
        ),
        _add,
    )
    repl.add_command(
        Command(
            "divide",
            (Parameter("numerator").set_required(), Parameter("denominator").set_required()),
            help="Divide two numbers",
        ),
        _divide,
    )
    if use_async:
        repl.add_async_command(hello, _hello_async)
    else:
        repl.add_command(hello, _hello)

    def count_commands(context: DemoContext) -> str:
        context.commands_run += 1
        return f"{name} [{context.commands_run}]> "

    repl.on_after_command(count_commands)
    return repl


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the replkit demo."""
    parser = argparse.ArgumentParser(
        prog="replkit",
        description="replkit demo - an embeddable command loop",
    )
    parser.add_argument("-n", "--name", default=DEMO_NAME, help="REPL name shown in the prompt")
    parser.add_argument("-l", "--log", help="Path to log file for structured events (optional)")
    parser.add_argument("--history", help="Path to a history file (optional)")
    parser.add_argument(
        "--async",
        dest="use_async",
        action="store_true",
        help="Run the suspendable loop",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    setup_logging(args.log)
    repl = build_demo_repl(
        name=args.name,
        use_async=args.use_async,
        history_file=Path(args.history).expanduser() if args.history else None,
    )

    if args.use_async:
        asyncio.run(repl.run_async())
    else:
        repl.run()
