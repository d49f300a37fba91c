from __future__ import annotations

import errno
import os

import pytest

from ked.constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
    ctrl,
)
from ked.keys import DecoderState, KeyDecoder, read_key
from ked.terminal import read_byte


def test_plain_bytes_pass_through() -> None:
    assert KeyDecoder().decode(b"a~\r\x01\x7f") == [ord("a"), ord("~"), ENTER, ctrl("a"), BACKSPACE]


def test_arrow_keys() -> None:
    assert KeyDecoder().decode(b"\x1b[A\x1b[B\x1b[C\x1b[D") == [ARROW_UP, ARROW_DOWN, ARROW_RIGHT, ARROW_LEFT]


@pytest.mark.parametrize("seq", [b"\x1b[1~", b"\x1b[7~", b"\x1b[H", b"\x1bOH"])
def test_home_aliases(seq: bytes) -> None:
    assert KeyDecoder().decode(seq) == [HOME_KEY]


@pytest.mark.parametrize("seq", [b"\x1b[4~", b"\x1b[8~", b"\x1b[F", b"\x1bOF"])
def test_end_aliases(seq: bytes) -> None:
    assert KeyDecoder().decode(seq) == [END_KEY]


def test_tilde_sequences() -> None:
    assert KeyDecoder().decode(b"\x1b[3~\x1b[5~\x1b[6~") == [DEL_KEY, PAGE_UP, PAGE_DOWN]


@pytest.mark.parametrize("seq", [b"\x1b", b"\x1b[", b"\x1b[3", b"\x1bO"])
def test_truncated_sequence_is_escape(seq: bytes) -> None:
    assert KeyDecoder().decode(seq) == [ESC]


@pytest.mark.parametrize("seq", [b"\x1bx", b"\x1b[Z", b"\x1b[5x", b"\x1b[9~", b"\x1bOA"])
def test_unknown_sequence_is_escape(seq: bytes) -> None:
    assert KeyDecoder().decode(seq) == [ESC]


def test_decoder_recovers_after_unknown_sequence() -> None:
    assert KeyDecoder().decode(b"\x1b[Zq\x1b[A") == [ESC, ord("q"), ARROW_UP]


def test_state_transitions() -> None:
    decoder = KeyDecoder()
    assert decoder.feed(0x1B) is None
    assert decoder.state is DecoderState.SAW_ESC
    assert decoder.feed(ord("[")) is None
    assert decoder.state is DecoderState.SAW_BRACKET
    assert decoder.feed(ord("6")) is None
    assert decoder.state is DecoderState.SAW_DIGIT
    assert decoder.feed(ord("~")) == PAGE_DOWN
    assert decoder.state is DecoderState.START


def test_timeout_resets_open_sequence() -> None:
    decoder = KeyDecoder()
    decoder.feed(0x1B)
    decoder.feed(ord("O"))
    assert decoder.state is DecoderState.SAW_SS3
    assert decoder.timeout() == ESC
    assert decoder.state is DecoderState.START


class TestReadKey:
    def test_reads_one_key_per_call(self) -> None:
        r, w = os.pipe()
        try:
            os.write(w, b"\x1b[5~q")
            assert read_key(r) == PAGE_UP
            assert read_key(r) == ord("q")
        finally:
            os.close(r)
            os.close(w)

    def test_lone_escape_does_not_wait_for_more(self) -> None:
        r, w = os.pipe()
        try:
            os.write(w, b"\x1b")
            os.close(w)
            assert read_key(r) == ESC
        finally:
            os.close(r)

    def test_read_failure_is_raised(self) -> None:
        r, w = os.pipe()
        os.close(w)
        os.close(r)
        with pytest.raises(OSError) as exc:
            read_byte(r)
        assert exc.value.errno == errno.EBADF
