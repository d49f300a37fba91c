from __future__ import annotations

import errno
import logging
import os

from .constants import KED_TAB_STOP
from .models import Row

logger = logging.getLogger(__name__)


class TextBuffer:
    """The document: an ordered list of rows plus its save state.

    ``dirty`` counts edits since the last load or save and only ever
    grows in between.
    """

    def __init__(self, tab_stop: int = KED_TAB_STOP) -> None:
        self.tab_stop = tab_stop
        self.rows: list[Row] = []
        self.dirty = 0
        self.filename: str | None = None

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def row_size(self, at: int) -> int:
        if 0 <= at < self.numrows:
            return self.rows[at].size
        return 0

    def insert_row(self, at: int, s: str) -> None:
        if at < 0 or at > self.numrows:
            return
        self.rows.insert(at, Row(s, self.tab_stop))
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= self.numrows:
            return
        del self.rows[at]
        self.dirty += 1

    def insert_char(self, row: int, col: int, c: str) -> None:
        if row == self.numrows:
            self.insert_row(self.numrows, "")
        if not 0 <= row < self.numrows:
            return
        self.rows[row].insert_char(col, c)
        self.dirty += 1

    def delete_char_before(self, row: int, col: int) -> tuple[int, int]:
        """Backspace at ``(row, col)``; returns the new ``(row, col)``."""
        if row >= self.numrows or (row == 0 and col == 0):
            return row, col

        if col > 0:
            if self.rows[row].delete_char(col - 1):
                self.dirty += 1
                return row, col - 1
            return row, col

        prev = self.rows[row - 1]
        joined_at = prev.size
        prev.append(self.rows[row].chars)
        self.dirty += 1
        self.delete_row(row)
        return row - 1, joined_at

    def split_row(self, row: int, col: int) -> None:
        if col == 0:
            self.insert_row(row, "")
            return
        if not 0 <= row < self.numrows:
            return
        current = self.rows[row]
        col = min(col, current.size)
        self.insert_row(row + 1, current.chars[col:])
        current.truncate(col)

    def serialize(self) -> tuple[int, bytes]:
        data = "".join(f"{row.chars}\n" for row in self.rows).encode("latin-1")
        return len(data), data

    def load(self, filename: str) -> None:
        try:
            with open(filename, "rb") as f:
                lines = [line.rstrip(b"\r\n") for line in f]
        except OSError as exc:
            raise OSError(exc.errno, f"Opening file failed: {filename}: {exc.strerror}") from exc

        self.rows = [Row(line.decode("latin-1"), self.tab_stop) for line in lines]
        self.filename = filename
        self.dirty = 0
        logger.info("loaded %s (%d lines)", filename, self.numrows)

    def save(self, filename: str | None = None) -> int:
        """Write the buffer out, truncating the target to the exact length.

        A failure midway leaves the file in an unspecified state and the
        buffer dirty; the ``OSError`` is propagated to the caller.
        """
        filename = filename or self.filename
        if not filename:
            raise OSError(errno.EINVAL, "no filename")

        length, data = self.serialize()
        fd = os.open(filename, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            os.ftruncate(fd, length)
            view = memoryview(data)
            while view:
                n = os.write(fd, view)
                if n <= 0:
                    raise OSError(errno.EIO, "short write")
                view = view[n:]
        finally:
            os.close(fd)

        self.filename = filename
        self.dirty = 0
        logger.info("saved %s (%d bytes)", filename, length)
        return length
