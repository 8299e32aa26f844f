"""
Unix terminal backend (Linux, macOS, BSD) built on termios.

Mode snapshots are the ``tcgetattr`` attribute list frozen into a tuple:
(iflag, oflag, cflag, lflag, ispeed, ospeed, cc).
"""

from __future__ import annotations

import fcntl
import os
import struct
import sys
import termios

from rawtty.exceptions import TerminalAccessError, TerminalIoError
from rawtty.logging import get_logger
from rawtty.terminal._base import TerminalSize

logger = get_logger(__name__)

# tcgetattr list indices
IFLAG = 0
OFLAG = 1
CFLAG = 2
LFLAG = 3
CC = 6

_WINSIZE_FORMAT = "HHHH"

UnixMode = tuple


def freeze_attrs(attrs: list) -> UnixMode:
    """Turn a tcgetattr list into an immutable snapshot."""
    return tuple(attrs[:CC]) + (tuple(attrs[CC]),)


def thaw_attrs(mode: UnixMode) -> list:
    """Turn a snapshot back into a fresh list accepted by tcsetattr."""
    return list(mode[:CC]) + [list(mode[CC])]


def make_raw_attrs(original: UnixMode, signal_passthrough: bool) -> list:
    """
    Derive raw-mode attributes from a snapshot.

    Output post-processing (OPOST) is left alone so "\\n" still moves the
    cursor to the start of the next line.
    """
    raw = thaw_attrs(original)
    raw[IFLAG] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    raw[CFLAG] |= termios.CS8
    raw[LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN)
    if not signal_passthrough:
        raw[LFLAG] &= ~termios.ISIG
    raw[CC][termios.VMIN] = 0
    raw[CC][termios.VTIME] = 0
    return raw


class UnixBackend:
    """
    termios backend.

    Args:
        fd: Input descriptor whose mode is changed. Defaults to stdin.
        out_fd: Descriptor used for the size query. Defaults to stdout.
        flush_input: Use TCSAFLUSH (discard pending input) rather than
            TCSADRAIN when changing modes.
    """

    def __init__(
        self,
        fd: int | None = None,
        out_fd: int | None = None,
        flush_input: bool = True,
    ) -> None:
        try:
            self.fd = sys.stdin.fileno() if fd is None else fd
            self.out_fd = sys.stdout.fileno() if out_fd is None else out_fd
        except (OSError, ValueError) as e:
            raise TerminalAccessError("fileno", cause=e) from e
        self._when = termios.TCSAFLUSH if flush_input else termios.TCSADRAIN

    # -------------------------------------------------------------------------
    # Mode lifecycle
    # -------------------------------------------------------------------------

    def capture(self) -> UnixMode:
        try:
            attrs = termios.tcgetattr(self.fd)
        except (termios.error, OSError) as e:
            raise TerminalAccessError("tcgetattr", cause=e) from e
        logger.debug(f"Captured terminal mode on fd {self.fd}")
        return freeze_attrs(attrs)

    def apply_raw(self, original: UnixMode, signal_passthrough: bool) -> None:
        raw = make_raw_attrs(original, signal_passthrough)
        try:
            termios.tcsetattr(self.fd, self._when, raw)
        except (termios.error, OSError) as e:
            self._rollback(original)
            raise TerminalAccessError("tcsetattr", cause=e) from e

        # tcsetattr succeeds if *any* requested change was applied
        try:
            applied = termios.tcgetattr(self.fd)
        except (termios.error, OSError) as e:
            self._rollback(original)
            raise TerminalAccessError("tcgetattr", cause=e) from e

        cleared = termios.ECHO | termios.ICANON
        if not signal_passthrough:
            cleared |= termios.ISIG
        if applied[LFLAG] & cleared:
            self._rollback(original)
            raise TerminalAccessError("tcsetattr", "raw mode only partially applied")

        logger.debug(f"Raw mode applied on fd {self.fd} (signal_passthrough={signal_passthrough})")

    def restore(self, original: UnixMode) -> None:
        try:
            termios.tcsetattr(self.fd, self._when, thaw_attrs(original))
        except (termios.error, OSError) as e:
            raise TerminalAccessError("tcsetattr", cause=e) from e
        logger.debug(f"Restored terminal mode on fd {self.fd}")

    def _rollback(self, original: UnixMode) -> None:
        try:
            termios.tcsetattr(self.fd, self._when, thaw_attrs(original))
        except (termios.error, OSError) as e:
            logger.critical(f"Rollback to original terminal mode failed on fd {self.fd}: {e}")

    # -------------------------------------------------------------------------
    # I/O
    # -------------------------------------------------------------------------

    def read_byte(self) -> int | None:
        try:
            data = os.read(self.fd, 1)
        except BlockingIOError:
            return None
        except OSError as e:
            raise TerminalIoError("read", cause=e) from e
        return data[0] if data else None

    def size(self) -> TerminalSize:
        buf = struct.pack(_WINSIZE_FORMAT, 0, 0, 0, 0)
        try:
            buf = fcntl.ioctl(self.out_fd, termios.TIOCGWINSZ, buf)
        except OSError as e:
            raise TerminalIoError("ioctl(TIOCGWINSZ)", cause=e) from e
        rows, cols, _, _ = struct.unpack(_WINSIZE_FORMAT, buf)
        if rows == 0 or cols == 0:
            raise TerminalIoError("ioctl(TIOCGWINSZ)", f"degenerate terminal size {rows}x{cols}")
        return TerminalSize(rows, cols)


__all__ = ["UnixBackend", "make_raw_attrs", "freeze_attrs", "thaw_attrs"]
