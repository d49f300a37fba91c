from __future__ import annotations

import time
from dataclasses import dataclass, field

from .constants import KED_MESSAGE_TIMEOUT, KED_TAB_STOP


def expand_tabs(chars: str, tab_stop: int = KED_TAB_STOP) -> str:
    out: list[str] = []
    idx = 0
    for ch in chars:
        if ch == "\t":
            out.append(" ")
            idx += 1
            while idx % tab_stop != 0:
                out.append(" ")
                idx += 1
        else:
            out.append(ch)
            idx += 1
    return "".join(out)


@dataclass(slots=True)
class Row:
    """One line of text.

    ``chars`` holds the stored bytes as Latin-1 text (one character per
    byte). ``render`` is ``chars`` with tabs expanded; every mutator goes
    through :meth:`update` so the two never disagree.
    """

    chars: str = ""
    tab_stop: int = KED_TAB_STOP
    render: str = field(default="", init=False)

    def __post_init__(self) -> None:
        self.update()

    @property
    def size(self) -> int:
        return len(self.chars)

    @property
    def rsize(self) -> int:
        return len(self.render)

    def update(self) -> None:
        self.render = expand_tabs(self.chars, self.tab_stop)

    def insert_char(self, at: int, c: str) -> None:
        if at < 0 or at > self.size:
            at = self.size
        self.chars = self.chars[:at] + c + self.chars[at:]
        self.update()

    def append(self, s: str) -> None:
        self.chars += s
        self.update()

    def delete_char(self, at: int) -> bool:
        if at < 0 or at >= self.size:
            return False
        self.chars = self.chars[:at] + self.chars[at + 1 :]
        self.update()
        return True

    def truncate(self, at: int) -> None:
        self.chars = self.chars[:at]
        self.update()


@dataclass(slots=True)
class Cursor:
    cx: int = 0
    cy: int = 0
    rx: int = 0


@dataclass(slots=True)
class Viewport:
    rowoff: int = 0
    coloff: int = 0
    screenrows: int = 0
    screencols: int = 0


@dataclass(slots=True)
class StatusMessage:
    text: str = ""
    time: float = 0.0
    timeout: float = KED_MESSAGE_TIMEOUT

    def set(self, fmt: str, *args: object) -> None:
        self.text = fmt % args if args else fmt
        self.time = time.time()

    def visible(self, now: float | None = None) -> str:
        now = time.time() if now is None else now
        if self.text and now - self.time < self.timeout:
            return self.text
        return ""


@dataclass(slots=True)
class SearchSession:
    last_match: int = -1
    direction: int = 1

    def reset(self) -> None:
        self.last_match = -1
        self.direction = 1
