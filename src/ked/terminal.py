from __future__ import annotations

import errno
import fcntl
import logging
import os
import re
import struct
import termios
from contextlib import AbstractContextManager

from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_FAR_CORNER,
    ANSI_CURSOR_HOME,
    ANSI_CURSOR_REPORT,
)

logger = logging.getLogger(__name__)

_WOULD_BLOCK = (errno.EAGAIN, errno.EWOULDBLOCK, errno.EINTR)


def read_byte(fd: int) -> int | None:
    """One read attempt; ``None`` when the read timed out with no data."""
    try:
        data = os.read(fd, 1)
    except OSError as exc:
        if exc.errno in _WOULD_BLOCK:
            return None
        raise OSError(exc.errno, f"read: {exc.strerror}") from exc
    if not data:
        return None
    return data[0]


def read_byte_blocking(fd: int) -> int:
    while True:
        c = read_byte(fd)
        if c is not None:
            return c


def write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        n = os.write(fd, view)
        if n <= 0:
            raise OSError(errno.EIO, "short write")
        view = view[n:]


def clear_screen(fd: int) -> None:
    write_all(fd, (ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME).encode())


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    if os.write(ofd, ANSI_CURSOR_REPORT.encode()) != 4:
        raise OSError(errno.EIO, "cursor query write failed")

    buf = bytearray()
    while len(buf) < 31:
        c = read_byte(ifd)
        if c is None:
            break
        buf.append(c)
        if c == ord("R"):
            break

    match = re.match(rb"\x1b\[(\d+);(\d+)R", bytes(buf))
    if not match:
        raise OSError(errno.EIO, "invalid cursor position response")
    return int(match.group(1)), int(match.group(2))


def get_window_size(ifd: int, ofd: int) -> tuple[int, int]:
    try:
        packed = fcntl.ioctl(ofd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
        rows, cols, _, _ = struct.unpack("HHHH", packed)
        if cols:
            return rows, cols
    except OSError:
        pass

    logger.info("TIOCGWINSZ unavailable, probing with cursor report")
    orig_row, orig_col = get_cursor_position(ifd, ofd)
    if os.write(ofd, ANSI_CURSOR_FAR_CORNER.encode()) != 12:
        raise OSError(errno.EIO, "window query write failed")
    rows, cols = get_cursor_position(ifd, ofd)
    write_all(ofd, f"\x1b[{orig_row};{orig_col}H".encode())
    return rows, cols


class RawMode(AbstractContextManager["RawMode"]):
    """Put a tty in raw mode for the duration of a ``with`` block.

    Reads return after at most 100 ms (VMIN=0, VTIME=1). The original
    attributes are restored on exit whatever the reason for leaving.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._orig: list | None = None

    def __enter__(self) -> "RawMode":
        if not os.isatty(self.fd):
            raise OSError(errno.ENOTTY, "stdin is not a tty")

        self._orig = termios.tcgetattr(self.fd)
        raw = termios.tcgetattr(self.fd)
        raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        raw[1] &= ~termios.OPOST
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = 1
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._orig is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._orig)
            self._orig = None
