"""Structured event emission and logging setup."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..constants import APP_NAME
from .formatter import StructuredTextFormatter

LOGGER_NAME = APP_NAME

_logger = logging.getLogger(LOGGER_NAME)
_logger.addHandler(logging.NullHandler())


def _to_log_safe(value: Any) -> Any:
    """Convert values to JSON-serializable, log-safe representations."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _to_log_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_log_safe(v) for v in value]
    return str(value)


def summarize_text(text: Any) -> str:
    """Return normalized summary text for logs."""
    if text is None:
        return ""
    return " ".join(str(text).split())


def summarize_command_args(_command: str, tokens: tuple[str, ...] | list[str]) -> str:
    """Summarize command argument tokens for logs."""
    if not tokens:
        return ""
    return summarize_text(" ".join(tokens))


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured log event on the replkit logger."""
    if not _logger.isEnabledFor(level):
        return
    payload = {
        "ts": datetime.now().astimezone().isoformat(),
        "event": event,
    }
    for key, value in fields.items():
        payload[key] = _to_log_safe(value)
    _logger.log(level, json.dumps(payload, ensure_ascii=False, separators=(",", ":")))


def setup_logging(log_file: Optional[str] = None) -> None:
    """Send replkit events to ``log_file``.

    Without a log file the library stays silent (a ``NullHandler`` is
    installed by the package); host applications may configure the
    ``replkit`` logger themselves instead.
    """
    if not log_file:
        return

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(log_path), encoding="utf-8")
    handler.setFormatter(StructuredTextFormatter())
    _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)
    _logger.propagate = False
