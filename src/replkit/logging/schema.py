"""Preferred key order for each structured log event."""

from __future__ import annotations

DEFAULT_EVENT_KEY_ORDER: list[str] = ["ts", "level", "message"]

EVENT_KEY_ORDER: dict[str, list[str]] = {
    # Session lifecycle
    "session_start": [
        "ts",
        "level",
        "repl_name",
        "version",
        "mode",
        "command_count",
        "init_command_count",
    ],
    "session_stop": [
        "ts",
        "level",
        "repl_name",
        "reason",
        "lines_dispatched",
    ],
    "terminal_acquire": ["ts", "level", "platform", "changed"],
    "terminal_release": ["ts", "level", "platform", "changed"],
    # Dispatch
    "command_exec": [
        "ts",
        "level",
        "command",
        "args_summary",
        "mode",
        "elapsed_ms",
    ],
    "command_error": [
        "ts",
        "level",
        "command",
        "args_summary",
        "mode",
        "error",
    ],
    "command_usage_error": ["ts", "level", "command", "args_summary"],
    "unknown_command": ["ts", "level", "command"],
    "after_command_error": [
        "ts",
        "level",
        "command",
        "error",
    ],
}
