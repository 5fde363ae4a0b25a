"""Session loop: read, dispatch, report, repeat."""

from __future__ import annotations

import logging
import os
import sys
import traceback
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, TextIO, TypeAlias, TypeVar

from .command import AsyncCallback, Command, CommandDefinition, SyncCallback
from .config import ReplConfig
from .constants import DEBUG_ENV_VAR
from .editor import LineEditor, LineSignal, LineSignalKind, PromptToolkitEditor
from .engine import AsyncHook, DispatchOutcome, ExecutionEngine, SyncHook
from .logging import log_event
from .prompt import PromptState
from .registry import CommandRegistry
from .terminal import terminal_capability

ContextT = TypeVar("ContextT")

ErrorHandler: TypeAlias = Callable[[Exception, "Repl[Any]"], None]


def default_error_handler(error: Exception, repl: Repl[Any]) -> None:
    """Print the error and keep the loop running."""
    stream = repl.err or sys.stderr
    print(error, file=stream)
    if os.getenv(DEBUG_ENV_VAR):
        print("Debug traceback:", file=stream)
        traceback.print_exception(type(error), error, error.__traceback__, file=stream)


def stop_on_error(error: Exception, repl: Repl[Any]) -> None:
    """Print the error and end the session after the current line."""
    default_error_handler(error, repl)
    repl.stop()


class Repl(Generic[ContextT]):
    """An embeddable command loop around one application context.

    Register commands, then call ``run()`` (blocking) or ``await
    run_async()`` (suspendable). Registration is closed while a loop runs.
    """

    def __init__(
        self,
        context: ContextT,
        config: ReplConfig | None = None,
        *,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.config = config or ReplConfig()
        self.out = out
        self.err = err
        self.registry = CommandRegistry()
        if self.config.prompt is None:
            self.prompt = PromptState.for_name(self.config.name)
        else:
            self.prompt = PromptState(self.config.prompt)
        self.engine: ExecutionEngine[ContextT] = ExecutionEngine(
            context,
            self.registry,
            self.prompt,
            name=self.config.name,
            version=self.config.version,
            description=self.config.description,
            out=out,
            err=err,
        )
        self.error_handler: ErrorHandler = default_error_handler
        self._running = False
        self._lines_dispatched = 0

    @property
    def context(self) -> ContextT:
        return self.engine.context

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _ensure_not_running(self) -> None:
        if self._running:
            raise RuntimeError("Commands cannot be changed while the session loop runs.")

    def add_command(
        self,
        command: Command,
        callback: Callable[[Mapping[str, Any], ContextT], str | None],
    ) -> Repl[ContextT]:
        """Register a blocking command; a same-named command is replaced."""
        self._ensure_not_running()
        self.registry.register(CommandDefinition(command, SyncCallback(callback)))
        return self

    def add_async_command(
        self,
        command: Command,
        callback: Callable[[Mapping[str, Any], ContextT], Awaitable[str | None]],
    ) -> Repl[ContextT]:
        """Register a suspendable command; a same-named command is replaced."""
        self._ensure_not_running()
        self.registry.register(CommandDefinition(command, AsyncCallback(callback)))
        return self

    def on_after_command(self, hook: Callable[[ContextT], str | None]) -> Repl[ContextT]:
        """Run ``hook`` after every invoked command; a returned string becomes the prompt."""
        self._ensure_not_running()
        self.engine.after_command = SyncHook(hook)
        return self

    def on_after_command_async(
        self, hook: Callable[[ContextT], Awaitable[str | None]]
    ) -> Repl[ContextT]:
        self._ensure_not_running()
        self.engine.after_command = AsyncHook(hook)
        return self

    def with_error_handler(self, handler: ErrorHandler) -> Repl[ContextT]:
        self._ensure_not_running()
        self.error_handler = handler
        return self

    # ------------------------------------------------------------------
    # Loop control
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """End the session after the current line."""
        self.engine.request_exit()

    @property
    def stopping(self) -> bool:
        return self.engine.exit_requested

    def _build_editor(self) -> LineEditor:
        return PromptToolkitEditor(self.config, self.registry)

    def _start(self, mode: str) -> list[str]:
        self._running = True
        self._lines_dispatched = 0
        self.engine.exit_requested = False
        if self.config.banner:
            print(self.config.banner, file=self.out or sys.stdout)
        log_event(
            "session_start",
            level=logging.INFO,
            repl_name=self.config.name,
            version=self.config.version,
            mode=mode,
            command_count=len(self.registry),
            init_command_count=len(self.config.init_commands),
        )
        # Popped from the end, so lines run in the order configured.
        return list(reversed(self.config.init_commands))

    def _finish(self, reason: str) -> None:
        self._running = False
        log_event(
            "session_stop",
            level=logging.INFO,
            repl_name=self.config.name,
            reason=reason,
            lines_dispatched=self._lines_dispatched,
        )

    def _signal_stop_reason(self, signal: LineSignal) -> str | None:
        """Return a stop reason for interrupt/end-of-input signals, or None to continue."""
        if signal.kind is LineSignalKind.INTERRUPT:
            return "interrupt" if self.config.stop_on_interrupt else None
        if signal.kind is LineSignalKind.END_OF_INPUT:
            return "end_of_input" if self.config.stop_on_end_of_input else None
        return None

    def _process_line(self, line: str) -> None:
        try:
            outcome = self.engine.dispatch(line)
        except Exception as error:
            self._lines_dispatched += 1
            self.error_handler(error, self)
            return
        if outcome is not DispatchOutcome.EMPTY:
            self._lines_dispatched += 1

    async def _process_line_async(self, line: str) -> None:
        try:
            outcome = await self.engine.dispatch_async(line)
        except Exception as error:
            self._lines_dispatched += 1
            self.error_handler(error, self)
            return
        if outcome is not DispatchOutcome.EMPTY:
            self._lines_dispatched += 1

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(self, editor: LineEditor | None = None) -> None:
        """Run the blocking session loop until exit, or a configured stop signal."""
        if self._running:
            raise RuntimeError("The session loop is already running.")

        reason = "error"
        with terminal_capability():
            pending = self._start("sync")
            try:
                line_editor = editor or self._build_editor()
                while True:
                    if pending:
                        self._process_line(pending.pop())
                        if self.stopping:
                            reason = "exit"
                            break
                        continue

                    signal = line_editor.read_line(self.prompt)
                    if signal.kind is LineSignalKind.SUCCESS:
                        self._process_line(signal.text)
                        if self.stopping:
                            reason = "exit"
                            break
                        continue

                    stop_reason = self._signal_stop_reason(signal)
                    if stop_reason is not None:
                        reason = stop_reason
                        break
            finally:
                self._finish(reason)

    async def run_async(self, editor: LineEditor | None = None) -> None:
        """Run the suspendable session loop.

        Each line, including its after-command hook, settles before the next
        line is read.
        """
        if self._running:
            raise RuntimeError("The session loop is already running.")

        reason = "error"
        with terminal_capability():
            pending = self._start("async")
            try:
                line_editor = editor or self._build_editor()
                while True:
                    if pending:
                        await self._process_line_async(pending.pop())
                        if self.stopping:
                            reason = "exit"
                            break
                        continue

                    signal = await line_editor.read_line_async(self.prompt)
                    if signal.kind is LineSignalKind.SUCCESS:
                        await self._process_line_async(signal.text)
                        if self.stopping:
                            reason = "exit"
                            break
                        continue

                    stop_reason = self._signal_stop_reason(signal)
                    if stop_reason is not None:
                        reason = stop_reason
                        break
            finally:
                self._finish(reason)
