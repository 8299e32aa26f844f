"""
Pytest configuration and fixtures for rawtty tests.
"""

from __future__ import annotations

import os
import sys
import time
from collections import deque

import pytest

from rawtty.config import reset_settings
from rawtty.exceptions import TerminalAccessError, TerminalIoError
from rawtty.terminal import TerminalSize

COOKED = ("cooked",)


class FakeBackend:
    """In-memory backend recording every mode change."""

    def __init__(
        self,
        pending: bytes = b"",
        size: TerminalSize | Exception = TerminalSize(24, 80),
    ) -> None:
        self.mode: tuple = COOKED
        self.pending = deque(pending)
        self._size = size
        self.calls: list[str] = []
        self.fail_capture: Exception | None = None
        self.fail_apply: Exception | None = None
        self.fail_restore: Exception | None = None
        self.fail_read: Exception | None = None

    def capture(self) -> tuple:
        self.calls.append("capture")
        if self.fail_capture:
            raise self.fail_capture
        return self.mode

    def apply_raw(self, original: tuple, signal_passthrough: bool) -> None:
        self.calls.append("apply_raw")
        if self.fail_apply:
            raise self.fail_apply
        self.mode = ("raw", signal_passthrough)

    def restore(self, original: tuple) -> None:
        self.calls.append("restore")
        if self.fail_restore:
            raise self.fail_restore
        self.mode = original

    def read_byte(self) -> int | None:
        self.calls.append("read_byte")
        if self.fail_read:
            raise self.fail_read
        return self.pending.popleft() if self.pending else None

    def size(self) -> TerminalSize:
        self.calls.append("size")
        if isinstance(self._size, Exception):
            raise self._size
        return self._size


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Provide a fake backend in cooked mode with no pending input."""
    return FakeBackend()


@pytest.fixture
def make_backend():
    """Factory for fake backends with scripted input or failures."""
    return FakeBackend


@pytest.fixture
def access_error() -> TerminalAccessError:
    return TerminalAccessError("tcsetattr", cause=OSError(5, "Input/output error"))


@pytest.fixture
def io_error() -> TerminalIoError:
    return TerminalIoError("read", cause=OSError(5, "Input/output error"))


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep RAWTTY_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("RAWTTY_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


# ============================================================================
# Pseudo-terminal fixtures (POSIX only)
# ============================================================================


def set_winsize(fd: int, rows: int, cols: int) -> None:
    """Set the window size reported by a pty."""
    import fcntl
    import struct
    import termios

    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


@pytest.fixture
def pty_pair():
    """
    Provide (master_fd, slave_fd) of a fresh pseudo-terminal.

    The slave starts in the kernel's default cooked mode with a 24x80 window.
    """
    if sys.platform == "win32":
        pytest.skip("pseudo-terminals are POSIX only")

    master, slave = os.openpty()
    set_winsize(slave, 24, 80)
    try:
        yield master, slave
    finally:
        os.close(master)
        os.close(slave)


@pytest.fixture
def set_pty_size():
    """Provide a helper that changes a pty window size."""
    return set_winsize


def read_eventually(session, timeout: float = 2.0) -> int | None:
    """Poll try_read_byte() until a byte shows up or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        value = session.try_read_byte()
        if value is not None:
            return value
        time.sleep(0.001)
    return None


@pytest.fixture
def read_byte_eventually():
    """Provide the polling reader helper."""
    return read_eventually
