"""Structured logging primitives for replkit."""

from .events import LOGGER_NAME, log_event, setup_logging, summarize_command_args, summarize_text
from .formatter import StructuredTextFormatter
from .schema import DEFAULT_EVENT_KEY_ORDER, EVENT_KEY_ORDER

__all__ = [
    "DEFAULT_EVENT_KEY_ORDER",
    "EVENT_KEY_ORDER",
    "LOGGER_NAME",
    "StructuredTextFormatter",
    "log_event",
    "setup_logging",
    "summarize_command_args",
    "summarize_text",
]
