"""Decoding raw terminal input into editor keys.

A key is an ``int``: either the byte value itself (printable characters,
control bytes, ``BACKSPACE``) or one of the named codes from
:mod:`ked.constants` (``ARROW_UP``, ``PAGE_DOWN`` ...).
"""

from __future__ import annotations

import enum
import logging

from .constants import CSI_SIMPLE_MAP, CSI_TILDE_MAP, ESC, SS3_SIMPLE_MAP
from .terminal import read_byte, read_byte_blocking

logger = logging.getLogger(__name__)


class DecoderState(enum.Enum):
    START = enum.auto()
    SAW_ESC = enum.auto()
    SAW_BRACKET = enum.auto()
    SAW_SS3 = enum.auto()
    SAW_DIGIT = enum.auto()


class KeyDecoder:
    """Byte-at-a-time escape sequence decoder.

    :meth:`feed` returns ``None`` while a sequence is still open and a key
    once it is resolved. A sequence that does not match anything resolves
    to ``ESC`` and the bytes consumed so far are dropped.
    """

    def __init__(self) -> None:
        self.state = DecoderState.START
        self._digit = 0
        self._pending: list[int] = []

    def reset(self) -> None:
        self.state = DecoderState.START
        self._digit = 0
        self._pending.clear()

    def _resolve(self, key: int) -> int:
        if key == ESC and len(self._pending) > 1:
            logger.debug("unrecognised escape sequence %r", bytes(self._pending))
        self.reset()
        return key

    def feed(self, byte: int) -> int | None:
        if self.state is DecoderState.START:
            if byte != ESC:
                return byte
            self._pending.append(byte)
            self.state = DecoderState.SAW_ESC
            return None

        self._pending.append(byte)
        if self.state is DecoderState.SAW_ESC:
            if byte == ord("["):
                self.state = DecoderState.SAW_BRACKET
                return None
            if byte == ord("O"):
                self.state = DecoderState.SAW_SS3
                return None
            return self._resolve(ESC)

        if self.state is DecoderState.SAW_BRACKET:
            if ord("0") <= byte <= ord("9"):
                self._digit = byte
                self.state = DecoderState.SAW_DIGIT
                return None
            return self._resolve(CSI_SIMPLE_MAP.get(byte, ESC))

        if self.state is DecoderState.SAW_SS3:
            return self._resolve(SS3_SIMPLE_MAP.get(byte, ESC))

        # SAW_DIGIT
        if byte == ord("~"):
            return self._resolve(CSI_TILDE_MAP.get(self._digit, ESC))
        return self._resolve(ESC)

    def timeout(self) -> int:
        """No more bytes arrived: an open sequence collapses to ``ESC``."""
        return self._resolve(ESC)

    def decode(self, data: bytes) -> list[int]:
        keys: list[int] = []
        for byte in data:
            key = self.feed(byte)
            if key is not None:
                keys.append(key)
        if self.state is not DecoderState.START:
            keys.append(self.timeout())
        return keys


def read_key(fd: int, decoder: KeyDecoder | None = None) -> int:
    """Block until one key is read from ``fd``.

    Only the first byte waits indefinitely; each byte after an ``ESC`` gets
    a single read attempt, bounded by the terminal's read timeout.
    """
    decoder = decoder or KeyDecoder()
    key = decoder.feed(read_byte_blocking(fd))
    while key is None:
        c = read_byte(fd)
        key = decoder.timeout() if c is None else decoder.feed(c)
    return key
