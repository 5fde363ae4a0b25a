"""Render replkit log records as readable ``=== event ===`` blocks."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from .schema import DEFAULT_EVENT_KEY_ORDER, EVENT_KEY_ORDER


def _parse_payload(record: logging.LogRecord) -> dict[str, Any]:
    """Return the event payload of a ``log_event`` record.

    Records logged with a plain message (third-party code, or direct
    ``logger.info`` calls) become an event named after their logger.
    """
    message = record.getMessage()
    if message.startswith("{") and message.endswith("}"):
        try:
            parsed = json.loads(message)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict) and "event" in parsed:
            return parsed
    return {"event": record.name, "message": message}


def _render_value(key: str, value: Any) -> str:
    if key == "elapsed_ms":
        return f"{value} ms"
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value).replace("\n", "\\n")


class StructuredTextFormatter(logging.Formatter):
    """Format structured records as blocks separated by a blank line.

    ``error_type`` and ``error`` are merged into one ``error: Type: message``
    line; ``ts`` falls back to the record's creation time.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._first_entry = True

    @staticmethod
    def _ordered_keys(event_name: str, data: dict[str, Any]) -> list[str]:
        preferred = EVENT_KEY_ORDER.get(event_name, DEFAULT_EVENT_KEY_ORDER)
        present = [k for k in preferred if data.get(k) is not None]
        remaining = sorted(k for k in data if k not in preferred and data[k] is not None)
        return present + remaining

    def format(self, record: logging.LogRecord) -> str:
        data = _parse_payload(record)
        event_name = str(data.pop("event"))
        data.setdefault("ts", datetime.fromtimestamp(record.created).astimezone().isoformat())
        data["level"] = record.levelname

        error_type = data.pop("error_type", None)
        if error_type:
            error = data.get("error")
            data["error"] = f"{error_type}: {error}" if error else error_type

        lines = [f"=== {event_name} ==="]
        for key in self._ordered_keys(event_name, data):
            lines.append(f"{key}: {_render_value(key, data[key])}")

        if record.exc_info:
            lines.append("traceback:")
            lines.append(self.formatException(record.exc_info))

        body = "\n".join(lines)
        if self._first_entry:
            self._first_entry = False
            return body
        return "\n" + body
