from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from .constants import ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT, ARROW_UP, ENTER, ESC
from .models import SearchSession
from .ui import PromptCallback, prompt
from .viewport import row_rx_to_cx

if TYPE_CHECKING:
    from .editor import Editor

SEARCH_PROMPT = "Search: %s (Use ESC/Arrows/Enter)"


def search_next_match(editor: Editor, query: str, session: SearchSession) -> tuple[int, int] | None:
    """Scan every row once, starting one step past the last match."""
    rows = editor.buffer.rows
    current = session.last_match
    for _ in range(len(rows)):
        current += session.direction
        if current == -1:
            current = len(rows) - 1
        elif current == len(rows):
            current = 0
        pos = rows[current].render.find(query)
        if pos != -1:
            return current, pos
    return None


def search_step(editor: Editor, session: SearchSession, query: str, key: int) -> None:
    if key in (ENTER, ESC):
        session.reset()
        return
    if key in (ARROW_RIGHT, ARROW_DOWN):
        session.direction = 1
    elif key in (ARROW_LEFT, ARROW_UP):
        session.direction = -1
    else:
        session.reset()

    if session.last_match == -1:
        session.direction = 1
    if not query:
        return

    match = search_next_match(editor, query, session)
    if match is None:
        return
    row, rx = match
    session.last_match = row
    editor.cursor.cy = row
    editor.cursor.cx = row_rx_to_cx(editor.buffer.rows[row], rx)
    # Past every row: the next scroll puts the match at the top of the screen.
    editor.view.rowoff = editor.buffer.numrows


def search_observer(editor: Editor, session: SearchSession) -> PromptCallback:
    def observe(query: str, key: int) -> None:
        search_step(editor, session, query, key)

    return observe


def find(editor: Editor) -> None:
    saved_cursor = replace(editor.cursor)
    saved_view = replace(editor.view)
    session = SearchSession()

    query = prompt(editor, SEARCH_PROMPT, search_observer(editor, session))
    if query is None:
        editor.cursor = saved_cursor
        editor.view.rowoff = saved_view.rowoff
        editor.view.coloff = saved_view.coloff
