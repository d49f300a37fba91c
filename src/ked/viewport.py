"""Mapping between logical and rendered columns, and scrolling."""

from __future__ import annotations

from dataclasses import replace

from .models import Cursor, Row, Viewport


def row_cx_to_rx(row: Row, cx: int) -> int:
    rx = 0
    for ch in row.chars[:cx]:
        if ch == "\t":
            rx += (row.tab_stop - 1) - (rx % row.tab_stop)
        rx += 1
    return rx


def row_rx_to_cx(row: Row, rx: int) -> int:
    cur_rx = 0
    for cx, ch in enumerate(row.chars):
        if ch == "\t":
            cur_rx += (row.tab_stop - 1) - (cur_rx % row.tab_stop)
        cur_rx += 1
        if cur_rx > rx:
            return cx
    return row.size


def recompute_scroll(cursor: Cursor, view: Viewport) -> Viewport:
    """Offsets that keep ``(cursor.cy, cursor.rx)`` on screen."""
    rowoff, coloff = view.rowoff, view.coloff
    if cursor.cy < rowoff:
        rowoff = cursor.cy
    if cursor.cy >= rowoff + view.screenrows:
        rowoff = cursor.cy - view.screenrows + 1
    if cursor.rx < coloff:
        coloff = cursor.rx
    if cursor.rx >= coloff + view.screencols:
        coloff = cursor.rx - view.screencols + 1
    return replace(view, rowoff=rowoff, coloff=coloff)
