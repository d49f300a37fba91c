from __future__ import annotations

KED_VERSION = "0.1.0"
KED_TAB_STOP = 8
KED_QUIT_TIMES = 3
KED_MESSAGE_TIMEOUT = 5.0

# Key actions.
ENTER = 13
ESC = 27
BACKSPACE = 127

ARROW_LEFT = 1000
ARROW_RIGHT = 1001
ARROW_UP = 1002
ARROW_DOWN = 1003
DEL_KEY = 1004
HOME_KEY = 1005
END_KEY = 1006
PAGE_UP = 1007
PAGE_DOWN = 1008


def ctrl(ch: str) -> int:
    return ord(ch.upper()) & 0x1F


CTRL_F = ctrl("f")
CTRL_H = ctrl("h")
CTRL_L = ctrl("l")
CTRL_Q = ctrl("q")
CTRL_S = ctrl("s")

# Escape sequences: ESC [ <final>, ESC [ <digit> ~, ESC O <final>.
CSI_SIMPLE_MAP = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}
CSI_TILDE_MAP = {
    ord("1"): HOME_KEY,
    ord("3"): DEL_KEY,
    ord("4"): END_KEY,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
    ord("7"): HOME_KEY,
    ord("8"): END_KEY,
}
SS3_SIMPLE_MAP = {
    ord("H"): HOME_KEY,
    ord("F"): END_KEY,
}

ANSI_HIDE_CURSOR = "\x1b[?25l"
ANSI_SHOW_CURSOR = "\x1b[?25h"
ANSI_CURSOR_HOME = "\x1b[H"
ANSI_CLEAR_LINE = "\x1b[K"
ANSI_CLEAR_SCREEN = "\x1b[2J"
ANSI_INVERT_ON = "\x1b[7m"
ANSI_INVERT_OFF = "\x1b[m"
ANSI_CURSOR_REPORT = "\x1b[6n"
ANSI_CURSOR_FAR_CORNER = "\x1b[999C\x1b[999B"

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"
