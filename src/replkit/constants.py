"""Shared constants for replkit.

Defaults for configuration fields live here so the config dataclass, the
engine and the demo CLI agree on them.
"""

# ============================================================================
# Identity
# ============================================================================

APP_NAME = "replkit"
DEFAULT_REPL_NAME = "repl"

# ============================================================================
# Built-in commands
# ============================================================================

BUILTIN_HELP = "help"
BUILTIN_EXIT = "exit"
BUILTIN_COMMANDS = (BUILTIN_HELP, BUILTIN_EXIT)

BUILTIN_HELP_SUMMARY = "Show this help, or detailed help for one command"
BUILTIN_EXIT_SUMMARY = "Exit the session"

# ============================================================================
# Styles (prompt_toolkit style strings)
# ============================================================================

PROMPT_STYLE = "bold fg:ansigreen"
HINT_STYLE = "italic fg:ansigray"
VALID_COMMAND_STYLE = "fg:ansigreen"

# ============================================================================
# Environment
# ============================================================================

# When set, the default error handler prints tracebacks.
DEBUG_ENV_VAR = "REPLKIT_DEBUG"
