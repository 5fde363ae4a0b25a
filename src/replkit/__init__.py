"""replkit - an embeddable command-loop engine built on prompt_toolkit."""

from .arguments import HelpRequested, ParsedArgs, UsageError
from .command import AsyncCallback, Callback, Command, CommandDefinition, SyncCallback
from .completion import CommandCompleter, Suggestion
from .config import (
    EditBuffer,
    KeyAction,
    KeyBinding,
    OpenCompletionMenu,
    ReplConfig,
    RunLine,
)
from .editor import LineEditor, LineSignal, LineSignalKind, PromptToolkitEditor
from .engine import (
    AfterCommandHook,
    AsyncHook,
    DispatchOutcome,
    DispatchState,
    ExecutionEngine,
    SyncHook,
)
from .errors import (
    IllegalDefaultError,
    IllegalRequiredError,
    ReplError,
    UnknownCommandError,
)
from .parameter import Parameter
from .prompt import PromptState
from .registry import CommandRegistry
from .repl import ErrorHandler, Repl, default_error_handler, stop_on_error
from .tokenizer import ParsedLine, tokenize

__version__ = "0.1.0"

__all__ = [
    "AfterCommandHook",
    "AsyncCallback",
    "AsyncHook",
    "Callback",
    "Command",
    "CommandCompleter",
    "CommandDefinition",
    "CommandRegistry",
    "DispatchOutcome",
    "DispatchState",
    "EditBuffer",
    "ErrorHandler",
    "ExecutionEngine",
    "HelpRequested",
    "IllegalDefaultError",
    "IllegalRequiredError",
    "KeyAction",
    "KeyBinding",
    "LineEditor",
    "LineSignal",
    "LineSignalKind",
    "OpenCompletionMenu",
    "Parameter",
    "ParsedArgs",
    "ParsedLine",
    "PromptState",
    "PromptToolkitEditor",
    "Repl",
    "ReplConfig",
    "ReplError",
    "RunLine",
    "Suggestion",
    "SyncCallback",
    "SyncHook",
    "UnknownCommandError",
    "UsageError",
    "__version__",
    "default_error_handler",
    "stop_on_error",
    "tokenize",
]
