"""
rawtty exceptions.

All errors raised by the library derive from RawTTYError so callers can
catch the whole family in one place.
"""

from __future__ import annotations


class RawTTYError(Exception):
    """Base exception for rawtty."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._original_cause = cause

    @property
    def cause(self) -> BaseException | None:
        """Underlying OS-level error, if any."""
        return self._original_cause


# =============================================================================
# Terminal Mode Errors
# =============================================================================


class TerminalAccessError(RawTTYError):
    """
    Terminal mode could not be read, changed or restored.

    Raised while opening a session (capture/apply) and while releasing it
    (restore). A restore failure may leave the terminal in raw mode.
    """

    def __init__(
        self,
        step: str,
        detail: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.step = step
        reason = detail or (str(cause) if cause is not None else "failed")
        super().__init__(f"Terminal mode access failed at {step}: {reason}", cause=cause)


# =============================================================================
# I/O Errors
# =============================================================================


class TerminalIoError(RawTTYError):
    """A byte read or size query failed."""

    def __init__(
        self,
        operation: str,
        detail: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        reason = detail or (str(cause) if cause is not None else "failed")
        super().__init__(f"Terminal {operation} failed: {reason}", cause=cause)


# =============================================================================
# Lifecycle Errors
# =============================================================================


class UseAfterCloseError(RawTTYError):
    """Operation invoked on a session whose terminal mode was already restored."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: terminal session already restored")


__all__ = [
    "RawTTYError",
    "TerminalAccessError",
    "TerminalIoError",
    "UseAfterCloseError",
]
