"""
rawtty: raw-mode terminal sessions.

Puts the controlling terminal into raw, unbuffered input mode, restores it
on every exit path, and offers non-blocking byte reads and size queries.

Usage:
    >>> from rawtty import open_session
    >>> with open_session() as term:
    ...     rows, cols = term.query_size()
"""

from rawtty.config import RawTTYSettings, configure_settings, get_settings, reset_settings
from rawtty.exceptions import (
    RawTTYError,
    TerminalAccessError,
    TerminalIoError,
    UseAfterCloseError,
)
from rawtty.terminal import SessionState, TerminalSession, TerminalSize, open_session

__version__ = "0.1.0"

__all__ = [
    # Session
    "open_session",
    "TerminalSession",
    "SessionState",
    "TerminalSize",
    # Errors
    "RawTTYError",
    "TerminalAccessError",
    "TerminalIoError",
    "UseAfterCloseError",
    # Config
    "RawTTYSettings",
    "get_settings",
    "configure_settings",
    "reset_settings",
]
