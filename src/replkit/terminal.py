"""Scoped terminal setup around the session loop.

On Windows consoles, ANSI escape processing must be switched on for styled
output; the previous console modes are restored when the scope exits, on
every exit path. Elsewhere this is a no-op.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

from .logging import log_event

_STD_OUTPUT_HANDLE = -11
_STD_ERROR_HANDLE = -12
_ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004


def _enable_virtual_terminal_processing() -> list[tuple[int, int]]:
    """Enable VT processing on stdout/stderr; return ``(handle, old_mode)`` pairs."""
    import ctypes
    from ctypes import wintypes

    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    restored: list[tuple[int, int]] = []
    for std_handle in (_STD_OUTPUT_HANDLE, _STD_ERROR_HANDLE):
        handle = kernel32.GetStdHandle(std_handle)
        mode = wintypes.DWORD()
        if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            continue
        if mode.value & _ENABLE_VIRTUAL_TERMINAL_PROCESSING:
            continue
        if kernel32.SetConsoleMode(handle, mode.value | _ENABLE_VIRTUAL_TERMINAL_PROCESSING):
            restored.append((handle, mode.value))
    return restored


def _restore_console_modes(restored: list[tuple[int, int]]) -> None:
    import ctypes

    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    for handle, mode in restored:
        kernel32.SetConsoleMode(handle, mode)


@contextmanager
def terminal_capability(platform: str | None = None) -> Iterator[None]:
    """Hold terminal capabilities for the duration of the block."""
    platform = platform or sys.platform
    restored: list[tuple[int, int]] = []
    if platform == "win32":
        restored = _enable_virtual_terminal_processing()
    log_event(
        "terminal_acquire",
        level=logging.DEBUG,
        platform=platform,
        changed=len(restored),
    )
    try:
        yield
    finally:
        if restored:
            _restore_console_modes(restored)
        log_event(
            "terminal_release",
            level=logging.DEBUG,
            platform=platform,
            changed=len(restored),
        )
