"""
Raw-mode terminal session.

A TerminalSession owns the terminal mode from construction until it is
closed. Use it as a context manager so the original mode is restored on
every exit path:

    >>> from rawtty import open_session
    >>> with open_session() as term:
    ...     rows, cols = term.query_size()
    ...     byte = term.try_read_byte()

Only one session may be live per terminal at a time. Nested or overlapping
sessions save each other's raw mode as "original" and restore the wrong
state; this is not detected.
"""

from __future__ import annotations

import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any

from rawtty.exceptions import TerminalAccessError, UseAfterCloseError
from rawtty.logging import get_logger
from rawtty.terminal._base import TerminalSize

if TYPE_CHECKING:
    from types import TracebackType

    from rawtty.config import RawTTYSettings
    from rawtty.terminal._base import TerminalBackend

logger = get_logger(__name__)


class SessionState(str, Enum):
    """Lifecycle of a terminal session."""

    UNOPENED = "unopened"
    ACTIVE = "active"
    RESTORED = "restored"


def _restore_abandoned(backend: TerminalBackend, original_mode: Any) -> None:
    """Finalizer for sessions collected or still alive at interpreter exit."""
    logger.warning("Terminal session was never closed; restoring original mode")
    try:
        backend.restore(original_mode)
    except TerminalAccessError as e:
        logger.critical(f"Terminal left in raw mode: {e}")
        raise


class TerminalSession:
    """
    Exclusive raw-mode ownership of a terminal.

    The constructor captures the current mode and switches to raw mode;
    close() puts the captured mode back exactly once.

    Args:
        backend: Native backend performing the terminal calls.
        signal_passthrough: Keep Ctrl-C and Ctrl-\\ generating signals. When
            False they arrive as bytes 0x03 and 0x1C.
        restore_at_exit: Register a finalizer restoring the terminal if the
            session is garbage-collected or the interpreter exits while it
            is still active.

    Raises:
        TerminalAccessError: The mode could not be read or applied. The
            terminal is left (or rolled back to) its original mode.
    """

    def __init__(
        self,
        backend: TerminalBackend,
        signal_passthrough: bool = False,
        *,
        restore_at_exit: bool = True,
    ) -> None:
        self._backend = backend
        self._signal_passthrough = signal_passthrough
        self._state = SessionState.UNOPENED
        self._finalizer: weakref.finalize | None = None

        self._original_mode = backend.capture()
        backend.apply_raw(self._original_mode, signal_passthrough)
        self._state = SessionState.ACTIVE

        if restore_at_exit:
            self._finalizer = weakref.finalize(self, _restore_abandoned, backend, self._original_mode)
        logger.debug("Terminal session opened")

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def signal_passthrough(self) -> bool:
        return self._signal_passthrough

    @property
    def original_mode(self) -> Any:
        """Immutable snapshot of the terminal mode captured at construction."""
        return self._original_mode

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _ensure_active(self, operation: str) -> None:
        if self._state is not SessionState.ACTIVE:
            raise UseAfterCloseError(operation)

    def try_read_byte(self) -> int | None:
        """
        Read one pending input byte without blocking.

        Returns:
            The byte value (0-255), or None if no input was waiting.

        Raises:
            TerminalIoError: The underlying read failed.
            UseAfterCloseError: The session was already closed.
        """
        self._ensure_active("read byte")
        return self._backend.read_byte()

    def query_size(self) -> TerminalSize:
        """
        Query the current terminal size.

        Returns:
            TerminalSize of (rows, cols), both positive.

        Raises:
            TerminalIoError: The query failed or reported a zero dimension.
            UseAfterCloseError: The session was already closed.
        """
        self._ensure_active("query size")
        return self._backend.size()

    def close(self) -> None:
        """
        Restore the original terminal mode.

        Safe to call more than once; only the first call touches the
        terminal. The session is closed even if the restore fails.

        Raises:
            TerminalAccessError: The original mode could not be reapplied.
        """
        if self._state is not SessionState.ACTIVE:
            return
        self._state = SessionState.RESTORED
        if self._finalizer is not None:
            self._finalizer.detach()

        try:
            self._backend.restore(self._original_mode)
        except TerminalAccessError as e:
            logger.error(f"Failed to restore terminal mode: {e}")
            raise
        logger.debug("Terminal session closed")

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    def __enter__(self) -> TerminalSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        # A restore failure here chains onto any in-flight exception
        self.close()

    def __repr__(self) -> str:
        return f"TerminalSession(state={self._state.value}, signal_passthrough={self._signal_passthrough})"


def open_session(
    signal_passthrough: bool | None = None,
    *,
    backend: TerminalBackend | None = None,
    settings: RawTTYSettings | None = None,
) -> TerminalSession:
    """
    Put the terminal into raw mode and return the owning session.

    Args:
        signal_passthrough: Keep Ctrl-C as a signal. Defaults to the
            configured ``signal_passthrough`` (False).
        backend: Backend to use. Defaults to the platform backend on
            stdin/stdout.
        settings: Settings to use. Defaults to the global settings.

    Returns:
        An active TerminalSession.

    Raises:
        TerminalAccessError: The terminal mode could not be read or changed.

    Example:
        >>> with open_session() as term:
        ...     while (b := term.try_read_byte()) != ord("q"):
        ...         pass
    """
    if settings is None:
        from rawtty.config import get_settings

        settings = get_settings()
    if signal_passthrough is None:
        signal_passthrough = settings.signal_passthrough
    if backend is None:
        from rawtty.terminal.modes import create_backend

        backend = create_backend(settings)

    return TerminalSession(
        backend,
        signal_passthrough,
        restore_at_exit=settings.restore_at_exit,
    )


__all__ = ["TerminalSession", "SessionState", "open_session"]
