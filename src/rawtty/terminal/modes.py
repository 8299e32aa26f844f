"""
Platform detection and backend selection.

Picks the termios backend on Unix (Linux, macOS) and the console-API
backend on Windows.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rawtty.config import RawTTYSettings
    from rawtty.terminal._base import TerminalBackend


def detect_platform() -> str:
    """Detect current platform."""
    if sys.platform == "darwin":
        return "macos"
    elif sys.platform.startswith("linux"):
        return "linux"
    elif sys.platform == "win32":
        return "windows"
    return "unknown"


def is_tty() -> bool:
    """Check if stdin is a TTY."""
    return sys.stdin.isatty()


def create_backend(settings: RawTTYSettings | None = None) -> TerminalBackend:
    """
    Create the native backend for the current platform.

    Args:
        settings: Settings to honour. Defaults to the global settings.

    Returns:
        A backend bound to standard input and standard output.
    """
    if settings is None:
        from rawtty.config import get_settings

        settings = get_settings()

    if detect_platform() == "windows":
        from rawtty.terminal._windows import WindowsBackend

        return WindowsBackend()

    # Everything non-Windows is assumed to speak termios
    from rawtty.terminal._unix import UnixBackend

    return UnixBackend(flush_input=settings.flush_input)


__all__ = ["detect_platform", "is_tty", "create_backend"]
