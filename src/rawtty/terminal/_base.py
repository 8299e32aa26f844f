"""
Backend protocol shared by the platform implementations.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Protocol


class TerminalSize(NamedTuple):
    """Terminal window dimensions in character cells."""

    rows: int
    cols: int


class TerminalBackend(Protocol):
    """
    Native terminal operations behind a TerminalSession.

    Backends raise TerminalAccessError for mode capture/apply/restore
    failures and TerminalIoError for read and size failures.
    """

    def capture(self) -> Any:
        """Return an immutable snapshot of the current terminal mode."""
        ...

    def apply_raw(self, original: Any, signal_passthrough: bool) -> None:
        """Derive raw mode from ``original`` and apply it."""
        ...

    def restore(self, original: Any) -> None:
        """Reapply a snapshot returned by capture()."""
        ...

    def read_byte(self) -> int | None:
        """Read at most one byte without blocking."""
        ...

    def size(self) -> TerminalSize:
        """Query the current window size."""
        ...
