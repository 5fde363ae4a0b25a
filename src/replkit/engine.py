"""Dispatch state machine: resolve, bind, invoke, complete.

One ``ExecutionEngine`` owns the application context for a session. Every
line goes through the same states::

    IDLE -> RESOLVING -> BUILTIN                          -> IDLE
                      -> BINDING -> INVOKING -> COMPLETING -> IDLE

and returns to ``IDLE`` whatever the outcome. Callback exceptions propagate
to the caller of ``dispatch``; binding failures and after-command hook
failures are printed and absorbed.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TextIO, TypeAlias, TypeVar

from .arguments import HelpRequested, ParsedArgs, UsageError, bind
from .command import AsyncCallback, CommandDefinition
from .constants import (
    BUILTIN_EXIT,
    BUILTIN_EXIT_SUMMARY,
    BUILTIN_HELP,
    BUILTIN_HELP_SUMMARY,
)
from .errors import UnknownCommandError
from .formatters import render_command_help, render_overview
from .logging import log_event, summarize_command_args
from .prompt import PromptState
from .registry import CommandRegistry
from .tokenizer import ParsedLine, tokenize

ContextT = TypeVar("ContextT")

_BUILTIN_SUMMARIES = {
    BUILTIN_HELP: BUILTIN_HELP_SUMMARY,
    BUILTIN_EXIT: BUILTIN_EXIT_SUMMARY,
}


class DispatchState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    BUILTIN = "builtin"
    BINDING = "binding"
    INVOKING = "invoking"
    COMPLETING = "completing"


class DispatchOutcome(Enum):
    """How a dispatched line finished (errors are raised instead)."""

    EMPTY = "empty"
    HELP = "help"
    EXIT = "exit"
    USAGE_ERROR = "usage_error"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class SyncHook:
    """Blocking after-command hook: ``fn(context) -> new prompt | None``."""

    fn: Callable[[Any], "str | None"]


@dataclass(frozen=True, slots=True)
class AsyncHook:
    """Suspendable after-command hook."""

    fn: Callable[[Any], Awaitable["str | None"]]


AfterCommandHook: TypeAlias = SyncHook | AsyncHook


class ExecutionEngine(Generic[ContextT]):
    """Resolve parsed lines against the registry and run their callbacks."""

    def __init__(
        self,
        context: ContextT,
        registry: CommandRegistry,
        prompt: PromptState,
        *,
        name: str,
        version: str = "",
        description: str = "",
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self._context = context
        self.registry = registry
        self.prompt = prompt
        self.name = name
        self.version = version
        self.description = description
        self.after_command: AfterCommandHook | None = None
        self.exit_requested = False
        self.state = DispatchState.IDLE
        self._out = out
        self._err = err

    @property
    def context(self) -> ContextT:
        """The application context; only valid between dispatches."""
        return self._context

    def request_exit(self) -> None:
        self.exit_requested = True

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def dispatch(self, line: str) -> DispatchOutcome:
        """Dispatch one input line on the blocking path.

        Async callbacks and hooks are driven to completion with
        ``asyncio.run``, so this must not be called from a running loop
        when such commands are registered.
        """
        parsed = tokenize(line)
        if parsed is None:
            return DispatchOutcome.EMPTY

        with self._dispatching():
            resolved = self._resolve(parsed)
            if isinstance(resolved, DispatchOutcome):
                return resolved

            args = self._bind(resolved, parsed)
            if isinstance(args, DispatchOutcome):
                return args

            started = time.perf_counter()
            self.state = DispatchState.INVOKING
            try:
                if isinstance(resolved.callback, AsyncCallback):
                    result = asyncio.run(resolved.callback.fn(args, self._context))
                else:
                    result = resolved.callback.fn(args, self._context)
                self._emit_result(result)
            except Exception as error:
                self._log_command_error(parsed, error, mode="sync")
                raise
            finally:
                self.state = DispatchState.COMPLETING
                self._run_after_command(parsed.command_name)

            self._log_command_exec(parsed, started, mode="sync")
            return DispatchOutcome.COMPLETED

    async def dispatch_async(self, line: str) -> DispatchOutcome:
        """Dispatch one input line on the suspendable path.

        Only the callback and the after-command hook may suspend; the line is
        fully settled, hook included, when this returns.
        """
        parsed = tokenize(line)
        if parsed is None:
            return DispatchOutcome.EMPTY

        with self._dispatching():
            resolved = self._resolve(parsed)
            if isinstance(resolved, DispatchOutcome):
                return resolved

            args = self._bind(resolved, parsed)
            if isinstance(args, DispatchOutcome):
                return args

            started = time.perf_counter()
            self.state = DispatchState.INVOKING
            try:
                if isinstance(resolved.callback, AsyncCallback):
                    result = await resolved.callback.fn(args, self._context)
                else:
                    result = resolved.callback.fn(args, self._context)
                self._emit_result(result)
            except Exception as error:
                self._log_command_error(parsed, error, mode="async")
                raise
            finally:
                self.state = DispatchState.COMPLETING
                await self._run_after_command_async(parsed.command_name)

            self._log_command_exec(parsed, started, mode="async")
            return DispatchOutcome.COMPLETED

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    @contextmanager
    def _dispatching(self) -> Iterator[None]:
        if self.state is not DispatchState.IDLE:
            raise RuntimeError("A command is already being dispatched on this engine.")
        try:
            yield
        finally:
            self.state = DispatchState.IDLE

    def _resolve(self, parsed: ParsedLine) -> CommandDefinition | DispatchOutcome:
        self.state = DispatchState.RESOLVING
        definition = self.registry.lookup(parsed.command_name)
        if definition is not None:
            return definition

        if parsed.command_name == BUILTIN_HELP:
            self.state = DispatchState.BUILTIN
            self._show_help(parsed.tokens)
            return DispatchOutcome.HELP

        if parsed.command_name == BUILTIN_EXIT:
            self.state = DispatchState.BUILTIN
            self.request_exit()
            return DispatchOutcome.EXIT

        log_event("unknown_command", level=logging.WARNING, command=parsed.command_name)
        raise UnknownCommandError(parsed.command_name)

    def _bind(
        self, definition: CommandDefinition, parsed: ParsedLine
    ) -> ParsedArgs | DispatchOutcome:
        self.state = DispatchState.BINDING
        try:
            return bind(definition.command, parsed.tokens)
        except HelpRequested as help_request:
            self._write_out(help_request.usage)
            return DispatchOutcome.HELP
        except UsageError as error:
            if error.usage:
                self._write_err(error.usage.rstrip("\n"))
            log_event(
                "command_usage_error",
                level=logging.WARNING,
                command=parsed.command_name,
                args_summary=summarize_command_args(parsed.command_name, parsed.tokens),
            )
            return DispatchOutcome.USAGE_ERROR

    def _show_help(self, tokens: tuple[str, ...]) -> None:
        if not tokens:
            self._write_out(
                render_overview(
                    self.registry,
                    name=self.name,
                    version=self.version,
                    description=self.description,
                )
            )
            return

        topic = tokens[0]
        definition = self.registry.lookup(topic)
        if definition is not None:
            self._write_out(render_command_help(definition))
        elif topic in _BUILTIN_SUMMARIES:
            self._write_out(f"{topic}: {_BUILTIN_SUMMARIES[topic]}")
        else:
            self._write_err(f"Help not found for command '{topic}'")

    def _emit_result(self, result: str | None) -> None:
        if result is not None:
            self._write_out(str(result))

    def _run_after_command(self, command_name: str) -> None:
        hook = self.after_command
        if hook is None:
            return
        try:
            if isinstance(hook, AsyncHook):
                new_prompt = asyncio.run(hook.fn(self._context))
            else:
                new_prompt = hook.fn(self._context)
        except Exception as error:
            self._report_hook_error(command_name, error)
            return
        if new_prompt is not None:
            self.prompt.update(new_prompt)

    async def _run_after_command_async(self, command_name: str) -> None:
        hook = self.after_command
        if hook is None:
            return
        try:
            if isinstance(hook, AsyncHook):
                new_prompt = await hook.fn(self._context)
            else:
                new_prompt = hook.fn(self._context)
        except Exception as error:
            self._report_hook_error(command_name, error)
            return
        if new_prompt is not None:
            self.prompt.update(new_prompt)

    # ------------------------------------------------------------------
    # Output and logging helpers
    # ------------------------------------------------------------------

    def _write_out(self, text: str) -> None:
        print(text, file=self._out or sys.stdout)

    def _write_err(self, text: str) -> None:
        print(text, file=self._err or sys.stderr)

    def _report_hook_error(self, command_name: str, error: Exception) -> None:
        self._write_err(f"failed to execute after-command hook: {error}")
        log_event(
            "after_command_error",
            level=logging.ERROR,
            command=command_name,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _log_command_exec(self, parsed: ParsedLine, started: float, *, mode: str) -> None:
        log_event(
            "command_exec",
            level=logging.INFO,
            command=parsed.command_name,
            args_summary=summarize_command_args(parsed.command_name, parsed.tokens),
            mode=mode,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )

    def _log_command_error(self, parsed: ParsedLine, error: Exception, *, mode: str) -> None:
        log_event(
            "command_error",
            level=logging.ERROR,
            command=parsed.command_name,
            args_summary=summarize_command_args(parsed.command_name, parsed.tokens),
            mode=mode,
            error_type=type(error).__name__,
            error=str(error),
        )
