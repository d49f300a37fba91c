from __future__ import annotations

import logging
import os
import signal
import sys
from typing import Callable, Final

from .buffer import TextBuffer
from .config import ENV_PREFIX, Settings
from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_H,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HELP_MESSAGE,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
)
from .keys import KeyDecoder, read_key
from .log import configure_logging
from .models import Cursor, Row, StatusMessage, Viewport
from .search import find
from .terminal import RawMode, clear_screen, get_window_size, write_all
from .ui import prompt, refresh_screen
from .viewport import recompute_scroll, row_cx_to_rx

STDIN_FD: Final[int] = 0
STDOUT_FD: Final[int] = 1

logger = logging.getLogger(__name__)


class Editor:
    """Everything one editing session owns: the buffer, cursor, viewport
    and status line, plus the terminal endpoints it reads keys from and
    writes frames to.

    ``read_key`` and ``write`` default to the terminal file descriptors and
    can be replaced to drive the editor without a tty.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        stdin_fd: int = STDIN_FD,
        stdout_fd: int = STDOUT_FD,
        read_key: Callable[[], int] | None = None,
        write: Callable[[bytes], None] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.buffer = TextBuffer(self.settings.tab_stop)
        self.cursor = Cursor()
        self.view = Viewport()
        self.status = StatusMessage(timeout=self.settings.message_timeout)
        self.quit_times = self.settings.quit_times
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._decoder = KeyDecoder()
        self._read_key = read_key
        self._write = write

    # Terminal endpoints.

    def read_key(self) -> int:
        if self._read_key is not None:
            return self._read_key()
        return read_key(self.stdin_fd, self._decoder)

    def write(self, data: bytes) -> None:
        if self._write is not None:
            self._write(data)
        else:
            write_all(self.stdout_fd, data)

    def set_window_size(self, rows: int, cols: int) -> None:
        # Two lines are reserved for the status and message bars.
        self.view.screenrows = max(1, rows - 2)
        self.view.screencols = max(1, cols)

    def update_window_size(self) -> None:
        try:
            rows, cols = get_window_size(self.stdin_fd, self.stdout_fd)
        except OSError as exc:
            raise OSError(exc.errno, "Unable to query screen size") from exc
        logger.debug("window size %dx%d", rows, cols)
        self.set_window_size(rows, cols)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.status.set(fmt, *args)

    # Screen.

    def current_row(self) -> Row | None:
        if self.cursor.cy < self.buffer.numrows:
            return self.buffer.rows[self.cursor.cy]
        return None

    def scroll(self) -> None:
        row = self.current_row()
        self.cursor.rx = row_cx_to_rx(row, self.cursor.cx) if row is not None else 0
        self.view = recompute_scroll(self.cursor, self.view)

    def refresh_screen(self) -> None:
        refresh_screen(self)

    # File operations.

    def open(self, filename: str) -> None:
        self.buffer.load(filename)
        self.cursor = Cursor()

    def save(self) -> None:
        if not self.buffer.filename:
            filename = prompt(self, "Save as: %s (ESC to cancel)")
            if filename is None:
                self.set_status_message("Save aborted")
                return
            self.buffer.filename = filename

        try:
            length = self.buffer.save()
        except OSError as exc:
            logger.warning("save to %s failed: %s", self.buffer.filename, exc)
            self.set_status_message("Can't save! I/O error: %s", exc.strerror or exc)
            return
        self.set_status_message("%d bytes written to disk", length)

    def find(self) -> None:
        find(self)

    # Editing.

    def insert_char(self, c: int) -> None:
        self.buffer.insert_char(self.cursor.cy, self.cursor.cx, chr(c & 0xFF))
        self.cursor.cx += 1

    def insert_newline(self) -> None:
        self.buffer.split_row(self.cursor.cy, self.cursor.cx)
        self.cursor.cy += 1
        self.cursor.cx = 0

    def delete_char(self) -> None:
        self.cursor.cy, self.cursor.cx = self.buffer.delete_char_before(self.cursor.cy, self.cursor.cx)

    def delete_forward(self) -> None:
        self.move_cursor(ARROW_RIGHT)
        self.delete_char()

    # Motion.

    def move_cursor(self, key: int) -> None:
        cursor = self.cursor
        row = self.current_row()

        if key == ARROW_LEFT:
            if cursor.cx != 0:
                cursor.cx -= 1
            elif cursor.cy > 0:
                cursor.cy -= 1
                cursor.cx = self.buffer.rows[cursor.cy].size
        elif key == ARROW_RIGHT:
            if row is not None and cursor.cx < row.size:
                cursor.cx += 1
            elif row is not None and cursor.cx == row.size:
                cursor.cy += 1
                cursor.cx = 0
        elif key == ARROW_UP:
            if cursor.cy != 0:
                cursor.cy -= 1
        elif key == ARROW_DOWN:
            if cursor.cy < self.buffer.numrows:
                cursor.cy += 1

        rowlen = self.buffer.row_size(cursor.cy)
        if cursor.cx > rowlen:
            cursor.cx = rowlen

    def move_home(self) -> None:
        self.cursor.cx = 0

    def move_end(self) -> None:
        row = self.current_row()
        if row is not None:
            self.cursor.cx = row.size

    def page(self, key: int) -> None:
        if key == PAGE_UP:
            self.cursor.cy = self.view.rowoff
        else:
            self.cursor.cy = min(self.view.rowoff + self.view.screenrows - 1, self.buffer.numrows)
        for _ in range(self.view.screenrows):
            self.move_cursor(ARROW_UP if key == PAGE_UP else ARROW_DOWN)

    def noop(self) -> None:
        pass

    # Input.

    def confirm_quit(self) -> None:
        if self.buffer.dirty:
            self.quit_times -= 1
            if self.quit_times > 0:
                self.set_status_message(
                    "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                    self.quit_times,
                )
                return
        self.write((ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME).encode())
        raise SystemExit(0)

    def process_keypress(self, key: int | None = None) -> None:
        c = self.read_key() if key is None else key
        if c == CTRL_Q:
            self.confirm_quit()
            return

        handler = KEY_HANDLERS.get(c)
        if handler is not None:
            handler(self)
        elif c < 256:
            self.insert_char(c)

        self.quit_times = self.settings.quit_times


def _motion(key: int) -> Callable[[Editor], None]:
    return lambda editor: editor.move_cursor(key)


def _page(key: int) -> Callable[[Editor], None]:
    return lambda editor: editor.page(key)


KEY_HANDLERS: dict[int, Callable[[Editor], None]] = {
    ENTER: Editor.insert_newline,
    CTRL_S: Editor.save,
    CTRL_F: Editor.find,
    CTRL_H: Editor.delete_char,
    BACKSPACE: Editor.delete_char,
    DEL_KEY: Editor.delete_forward,
    HOME_KEY: Editor.move_home,
    END_KEY: Editor.move_end,
    PAGE_UP: _page(PAGE_UP),
    PAGE_DOWN: _page(PAGE_DOWN),
    ARROW_UP: _motion(ARROW_UP),
    ARROW_DOWN: _motion(ARROW_DOWN),
    ARROW_LEFT: _motion(ARROW_LEFT),
    ARROW_RIGHT: _motion(ARROW_RIGHT),
    CTRL_L: Editor.noop,
    ESC: Editor.noop,
}


def run(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: ked [filename]", file=sys.stderr)
        return 1

    configure_logging(os.environ.get(f"{ENV_PREFIX}LOG_FILE", ""))
    settings = Settings.from_env()
    if not os.isatty(STDIN_FD) or not os.isatty(STDOUT_FD):
        print("ked: stdin/stdout must be a tty", file=sys.stderr)
        return 1

    editor = Editor(settings)
    try:
        with RawMode(STDIN_FD):
            try:
                editor.update_window_size()
                if args:
                    editor.open(args[0])
                signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
                editor.set_status_message(HELP_MESSAGE)
                while True:
                    editor.refresh_screen()
                    editor.process_keypress()
            except OSError:
                clear_screen(STDOUT_FD)
                raise
    except OSError as exc:
        logger.error("fatal: %s", exc)
        print(f"ked: {exc}", file=sys.stderr)
        return 1
    except SystemExit as exc:
        if isinstance(exc.code, int):
            return exc.code
        return 0
