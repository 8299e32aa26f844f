"""
Windows console backend built on kernel32 via ctypes.

Both the input and the output handle modes are captured; VT processing is
enabled on output so escape sequences written by the caller are honoured.
"""

from __future__ import annotations

import ctypes
from ctypes import wintypes
from typing import Any, NamedTuple

from rawtty.exceptions import TerminalAccessError, TerminalIoError
from rawtty.logging import get_logger
from rawtty.terminal._base import TerminalSize

logger = get_logger(__name__)

STD_INPUT_HANDLE = -10
STD_OUTPUT_HANDLE = -11
INVALID_HANDLE_VALUE = ctypes.c_void_p(-1).value

# Input modes
ENABLE_PROCESSED_INPUT = 0x0001
ENABLE_LINE_INPUT = 0x0002
ENABLE_ECHO_INPUT = 0x0004
ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200

# Output modes
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

DWORD = wintypes.DWORD


class _COORD(ctypes.Structure):
    _fields_ = [
        ("X", ctypes.c_short),
        ("Y", ctypes.c_short),
    ]


class _SMALL_RECT(ctypes.Structure):
    _fields_ = [
        ("Left", ctypes.c_short),
        ("Top", ctypes.c_short),
        ("Right", ctypes.c_short),
        ("Bottom", ctypes.c_short),
    ]


class _CONSOLE_SCREEN_BUFFER_INFO(ctypes.Structure):
    _fields_ = [
        ("dwSize", _COORD),
        ("dwCursorPosition", _COORD),
        ("wAttributes", ctypes.c_ushort),
        ("srWindow", _SMALL_RECT),
        ("dwMaximumWindowSize", _COORD),
    ]


class ConsoleModes(NamedTuple):
    """Snapshot of both console handle modes."""

    input_mode: int
    output_mode: int


def make_raw_modes(original: ConsoleModes, signal_passthrough: bool) -> ConsoleModes:
    """Derive raw console modes from a snapshot."""
    in_mode = original.input_mode | ENABLE_VIRTUAL_TERMINAL_INPUT
    in_mode &= ~(ENABLE_LINE_INPUT | ENABLE_ECHO_INPUT)
    if not signal_passthrough:
        in_mode &= ~ENABLE_PROCESSED_INPUT
    out_mode = original.output_mode | ENABLE_VIRTUAL_TERMINAL_PROCESSING
    return ConsoleModes(in_mode, out_mode)


def declare_prototypes(kernel32: Any) -> None:
    """
    Declare argument and return types for the kernel32 calls used here.

    Without them ctypes converts handles as C ``int``, which overflows for
    64-bit handle values.
    """
    kernel32.GetStdHandle.argtypes = [DWORD]
    kernel32.GetStdHandle.restype = wintypes.HANDLE

    kernel32.GetConsoleMode.argtypes = [wintypes.HANDLE, wintypes.LPDWORD]
    kernel32.GetConsoleMode.restype = wintypes.BOOL

    kernel32.SetConsoleMode.argtypes = [wintypes.HANDLE, DWORD]
    kernel32.SetConsoleMode.restype = wintypes.BOOL

    kernel32.ReadFile.argtypes = [
        wintypes.HANDLE,
        wintypes.LPVOID,
        DWORD,
        wintypes.LPDWORD,
        wintypes.LPVOID,
    ]
    kernel32.ReadFile.restype = wintypes.BOOL

    kernel32.GetConsoleScreenBufferInfo.argtypes = [
        wintypes.HANDLE,
        ctypes.POINTER(_CONSOLE_SCREEN_BUFFER_INFO),
    ]
    kernel32.GetConsoleScreenBufferInfo.restype = wintypes.BOOL

    kernel32.GetLastError.argtypes = []
    kernel32.GetLastError.restype = DWORD


class WindowsBackend:
    """
    kernel32 console backend.

    Args:
        kernel32: kernel32 function table. Defaults to ``ctypes.windll.kernel32``.
        msvcrt_module: Module providing ``kbhit()``. Defaults to ``msvcrt``.
    """

    def __init__(self, kernel32: Any = None, msvcrt_module: Any = None) -> None:
        if kernel32 is None:
            kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        if msvcrt_module is None:
            import msvcrt as msvcrt_module  # type: ignore[no-redef]

        declare_prototypes(kernel32)
        self._kernel32 = kernel32
        self._msvcrt = msvcrt_module
        self._hin = self._get_handle(STD_INPUT_HANDLE)
        self._hout = self._get_handle(STD_OUTPUT_HANDLE)

    def _get_handle(self, which: int) -> Any:
        handle = self._kernel32.GetStdHandle(which)
        if handle is None or handle == INVALID_HANDLE_VALUE:
            raise TerminalAccessError("GetStdHandle", f"no console handle for {which}")
        return handle

    def _last_error(self, call: str) -> OSError:
        code = self._kernel32.GetLastError()
        return OSError(code, f"{call} failed (error {code})")

    def _get_mode(self, handle: Any) -> int:
        mode = DWORD(0)
        if not self._kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            raise TerminalAccessError("GetConsoleMode", cause=self._last_error("GetConsoleMode"))
        return mode.value

    def _set_mode(self, handle: Any, mode: int) -> None:
        if not self._kernel32.SetConsoleMode(handle, DWORD(mode)):
            raise TerminalAccessError("SetConsoleMode", cause=self._last_error("SetConsoleMode"))

    # -------------------------------------------------------------------------
    # Mode lifecycle
    # -------------------------------------------------------------------------

    def capture(self) -> ConsoleModes:
        modes = ConsoleModes(self._get_mode(self._hin), self._get_mode(self._hout))
        logger.debug(f"Captured console modes in={modes.input_mode:#x} out={modes.output_mode:#x}")
        return modes

    def apply_raw(self, original: ConsoleModes, signal_passthrough: bool) -> None:
        raw = make_raw_modes(original, signal_passthrough)
        self._set_mode(self._hout, raw.output_mode)
        try:
            self._set_mode(self._hin, raw.input_mode)
        except TerminalAccessError:
            # Output handle already switched
            try:
                self._set_mode(self._hout, original.output_mode)
            except TerminalAccessError as e:
                logger.critical(f"Rollback of console output mode failed: {e}")
            raise
        logger.debug(f"Raw console mode applied (signal_passthrough={signal_passthrough})")

    def restore(self, original: ConsoleModes) -> None:
        errors: list[TerminalAccessError] = []
        for handle, mode in ((self._hout, original.output_mode), (self._hin, original.input_mode)):
            try:
                self._set_mode(handle, mode)
            except TerminalAccessError as e:
                errors.append(e)
        if errors:
            raise errors[0]
        logger.debug("Restored console modes")

    # -------------------------------------------------------------------------
    # I/O
    # -------------------------------------------------------------------------

    def read_byte(self) -> int | None:
        if not self._msvcrt.kbhit():
            return None
        buf = ctypes.create_string_buffer(1)
        nread = DWORD(0)
        if not self._kernel32.ReadFile(self._hin, buf, 1, ctypes.byref(nread), None):
            raise TerminalIoError("ReadFile", cause=self._last_error("ReadFile"))
        if nread.value != 1:
            raise TerminalIoError("ReadFile", "kbhit() and ReadFile() inconsistent")
        return buf.raw[0]

    def size(self) -> TerminalSize:
        info = _CONSOLE_SCREEN_BUFFER_INFO()
        if not self._kernel32.GetConsoleScreenBufferInfo(self._hout, ctypes.byref(info)):
            raise TerminalIoError(
                "GetConsoleScreenBufferInfo",
                cause=self._last_error("GetConsoleScreenBufferInfo"),
            )
        window = info.srWindow
        cols = window.Right - window.Left + 1
        rows = window.Bottom - window.Top + 1
        if rows <= 0 or cols <= 0:
            raise TerminalIoError("GetConsoleScreenBufferInfo", f"degenerate terminal size {rows}x{cols}")
        return TerminalSize(rows, cols)


__all__ = ["WindowsBackend", "ConsoleModes", "declare_prototypes", "make_raw_modes"]
