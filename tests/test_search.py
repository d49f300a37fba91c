from __future__ import annotations

from ked.constants import ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT, ARROW_UP, BACKSPACE, ENTER, ESC
from ked.models import SearchSession
from ked.search import search_step


def type_query(editor, session: SearchSession, query: str) -> None:
    for i in range(1, len(query) + 1):
        search_step(editor, session, query[:i], ord(query[i - 1]))


class TestSearchStep:
    def test_forward_search_wraps_and_skips_non_matches(self, make_editor) -> None:
        editor = make_editor(["foo", "bar", "foobar"])
        session = SearchSession()
        type_query(editor, session, "foo")
        visited = [editor.cursor.cy]
        for _ in range(3):
            search_step(editor, session, "foo", ARROW_DOWN)
            visited.append(editor.cursor.cy)
        assert visited == [0, 2, 0, 2]

    def test_backward_search_wraps(self, make_editor) -> None:
        editor = make_editor(["foo", "bar", "foobar"])
        session = SearchSession()
        type_query(editor, session, "foo")
        search_step(editor, session, "foo", ARROW_UP)
        assert editor.cursor.cy == 2
        search_step(editor, session, "foo", ARROW_LEFT)
        assert editor.cursor.cy == 0
        assert session.direction == -1
        search_step(editor, session, "foo", ARROW_RIGHT)
        assert editor.cursor.cy == 2

    def test_new_character_restarts_from_the_top(self, make_editor) -> None:
        editor = make_editor(["ab", "abc", "abc"])
        session = SearchSession()
        type_query(editor, session, "ab")
        search_step(editor, session, "ab", ARROW_DOWN)
        assert editor.cursor.cy == 1
        search_step(editor, session, "abc", ord("c"))
        assert editor.cursor.cy == 1
        assert session.direction == 1

    def test_match_column_is_mapped_back_from_render(self, make_editor) -> None:
        editor = make_editor(["\tfoo"])
        search_step(editor, SearchSession(), "foo", ord("o"))
        assert (editor.cursor.cy, editor.cursor.cx) == (0, 1)

    def test_no_match_leaves_cursor(self, make_editor) -> None:
        editor = make_editor(["alpha", "beta"])
        editor.cursor.cy, editor.cursor.cx = 1, 2
        session = SearchSession()
        search_step(editor, session, "zeta", ord("a"))
        assert (editor.cursor.cy, editor.cursor.cx) == (1, 2)
        assert session.last_match == -1

    def test_empty_query_does_not_move(self, make_editor) -> None:
        editor = make_editor(["alpha", "beta"])
        editor.cursor.cy = 1
        search_step(editor, SearchSession(), "", BACKSPACE)
        assert editor.cursor.cy == 1

    def test_enter_and_escape_reset_the_session(self, make_editor) -> None:
        editor = make_editor(["foo", "foo"])
        for key in (ENTER, ESC):
            session = SearchSession()
            type_query(editor, session, "foo")
            search_step(editor, session, "foo", ARROW_UP)
            search_step(editor, session, "foo", key)
            assert (session.last_match, session.direction) == (-1, 1)

    def test_match_is_scrolled_to_the_top(self, make_editor) -> None:
        lines = ["x"] * 40
        lines[25] = "needle"
        editor = make_editor(lines, rows=12)
        search_step(editor, SearchSession(), "needle", ord("e"))
        assert editor.view.rowoff == editor.buffer.numrows
        editor.scroll()
        assert editor.view.rowoff == 25


class TestFind:
    def test_enter_keeps_match_position(self, make_editor, term) -> None:
        editor = make_editor(["one", "two", "three two"])
        term.feed("two", ARROW_DOWN, ENTER)
        editor.find()
        assert (editor.cursor.cy, editor.cursor.cx) == (2, 6)
        assert editor.status.text == ""

    def test_escape_restores_cursor_and_offsets(self, make_editor, term) -> None:
        lines = [f"line {i}" for i in range(50)]
        editor = make_editor(lines, rows=12)
        editor.cursor.cy, editor.cursor.cx = 3, 2
        editor.scroll()
        term.feed("line 42", ESC)
        editor.find()
        assert (editor.cursor.cy, editor.cursor.cx) == (3, 2)
        assert (editor.view.rowoff, editor.view.coloff) == (0, 0)

    def test_search_prompt_is_displayed(self, make_editor, term) -> None:
        editor = make_editor(["abc"])
        term.feed("b", ENTER)
        editor.find()
        assert b"Search: b (Use ESC/Arrows/Enter)" in term.frames[-1]
