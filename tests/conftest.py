from __future__ import annotations

from typing import Callable, Iterable

import pytest

from ked.config import Settings
from ked.editor import Editor


class FakeTerminal:
    """Scripted key source and frame sink standing in for the tty."""

    def __init__(self) -> None:
        self.keys: list[int] = []
        self.frames: list[bytes] = []

    def feed(self, *keys: int | str) -> None:
        for key in keys:
            if isinstance(key, str):
                self.keys.extend(ord(ch) for ch in key)
            else:
                self.keys.append(key)

    def read_key(self) -> int:
        if not self.keys:
            raise AssertionError("editor asked for more keys than were scripted")
        return self.keys.pop(0)

    def write(self, data: bytes) -> None:
        self.frames.append(data)


@pytest.fixture
def term() -> FakeTerminal:
    return FakeTerminal()


@pytest.fixture
def make_editor(term: FakeTerminal) -> Callable[..., Editor]:
    def factory(
        lines: Iterable[str] = (),
        rows: int = 12,
        cols: int = 40,
        settings: Settings | None = None,
    ) -> Editor:
        editor = Editor(settings, read_key=term.read_key, write=term.write)
        editor.set_window_size(rows, cols)
        for line in lines:
            editor.buffer.insert_row(editor.buffer.numrows, line)
        editor.buffer.dirty = 0
        return editor

    return factory
