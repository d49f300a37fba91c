from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

from .constants import (
    ANSI_CLEAR_LINE,
    ANSI_CURSOR_HOME,
    ANSI_HIDE_CURSOR,
    ANSI_INVERT_OFF,
    ANSI_INVERT_ON,
    ANSI_SHOW_CURSOR,
    BACKSPACE,
    CTRL_H,
    DEL_KEY,
    ENTER,
    ESC,
    KED_VERSION,
)

if TYPE_CHECKING:
    from .editor import Editor

PromptCallback = Callable[[str, int], None]


def draw_rows(editor: Editor, ab: list[str]) -> None:
    buf, view = editor.buffer, editor.view
    for y in range(view.screenrows):
        filerow = view.rowoff + y
        if filerow >= buf.numrows:
            if buf.numrows == 0 and y == view.screenrows // 3:
                draw_welcome(editor, ab)
            else:
                ab.append("~")
        else:
            render = buf.rows[filerow].render
            ab.append(render[view.coloff : view.coloff + view.screencols])
        ab.append(ANSI_CLEAR_LINE)
        ab.append("\r\n")


def draw_welcome(editor: Editor, ab: list[str]) -> None:
    screencols = editor.view.screencols
    welcome = f"Ked editor -- version {KED_VERSION}"[:screencols]
    padding = (screencols - len(welcome)) // 2
    if padding:
        ab.append("~")
        padding -= 1
    if padding > 0:
        ab.append(" " * padding)
    ab.append(welcome)


def draw_status_bar(editor: Editor, ab: list[str]) -> None:
    buf, screencols = editor.buffer, editor.view.screencols
    filename = buf.filename or "[No Name]"
    status = f"{filename:.20} - {buf.numrows} lines {'(modified)' if buf.dirty else ''}"
    rstatus = f"{editor.cursor.cy + 1}/{buf.numrows}"
    status = status[:screencols]

    ab.append(ANSI_INVERT_ON)
    ab.append(status)
    fill = len(status)
    while fill < screencols:
        if screencols - fill == len(rstatus):
            ab.append(rstatus)
            break
        ab.append(" ")
        fill += 1
    ab.append(ANSI_INVERT_OFF)
    ab.append("\r\n")


def draw_message_bar(editor: Editor, ab: list[str], now: float | None = None) -> None:
    ab.append(ANSI_CLEAR_LINE)
    msg = editor.status.visible(now)
    if msg:
        ab.append(msg[: editor.view.screencols])


def compose_frame(editor: Editor, now: float | None = None) -> bytes:
    """Scroll, then build one complete frame as a single byte string."""
    editor.scroll()
    cursor, view = editor.cursor, editor.view

    ab: list[str] = [ANSI_HIDE_CURSOR, ANSI_CURSOR_HOME]
    draw_rows(editor, ab)
    draw_status_bar(editor, ab)
    draw_message_bar(editor, ab, now)
    ab.append(f"\x1b[{cursor.cy - view.rowoff + 1};{cursor.rx - view.coloff + 1}H")
    ab.append(ANSI_SHOW_CURSOR)
    return "".join(ab).encode("latin-1", errors="replace")


def refresh_screen(editor: Editor) -> None:
    editor.write(compose_frame(editor, time.time()))


def prompt(editor: Editor, fmt: str, callback: PromptCallback | None = None) -> str | None:
    """Read a line of input in the message bar.

    ``fmt`` gets the text typed so far through ``%s``. ``callback`` sees
    every key together with the text as it stands after that key. Returns
    the text on Enter (only when non-empty), ``None`` on ESC.
    """
    buf = ""
    while True:
        editor.set_status_message(fmt, buf)
        editor.refresh_screen()

        c = editor.read_key()
        if c in (DEL_KEY, CTRL_H, BACKSPACE):
            buf = buf[:-1]
        elif c == ESC:
            editor.set_status_message("")
            if callback is not None:
                callback(buf, c)
            return None
        elif c == ENTER:
            if buf:
                editor.set_status_message("")
                if callback is not None:
                    callback(buf, c)
                return buf
        elif 32 <= c < 127:
            buf += chr(c)

        if callback is not None:
            callback(buf, c)
