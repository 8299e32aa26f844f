"""
Terminal session support.

Usage:
    >>> from rawtty.terminal import open_session
    >>> with open_session() as term:
    ...     byte = term.try_read_byte()
"""

from rawtty.terminal._base import TerminalBackend, TerminalSize
from rawtty.terminal.modes import create_backend, detect_platform, is_tty
from rawtty.terminal.session import SessionState, TerminalSession, open_session

__all__ = [
    # Session
    "TerminalSession",
    "SessionState",
    "open_session",
    # Backends
    "TerminalBackend",
    "TerminalSize",
    "create_backend",
    # Platform
    "detect_platform",
    "is_tty",
]
