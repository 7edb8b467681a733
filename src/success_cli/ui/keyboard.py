"""Raw terminal keyboard input decoded into ``KeyEvent``s."""

from __future__ import annotations

import os
import select
import sys
import termios
import tty
from collections.abc import Iterator
from contextlib import contextmanager

from success_cli.models import KeyCode, KeyEvent

ESC = 0x1B
# How long to wait for the rest of a split key before decoding what arrived
SEQUENCE_WAIT_SECONDS = 0.05

_CSI_FINAL = {
    "A": KeyCode.UP,
    "B": KeyCode.DOWN,
    "C": KeyCode.RIGHT,
    "D": KeyCode.LEFT,
    "H": KeyCode.HOME,
    "F": KeyCode.END,
}
_TILDE_CODES = {
    1: KeyCode.HOME,
    3: KeyCode.DELETE,
    4: KeyCode.END,
    7: KeyCode.HOME,
    8: KeyCode.END,
}


def _utf8_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC0 <= lead < 0xE0:
        return 2
    if 0xE0 <= lead < 0xF0:
        return 3
    if 0xF0 <= lead < 0xF8:
        return 4
    return 1


def _decode_csi(params: str, final: str) -> KeyEvent:
    """Decode ``ESC [ params final``, e.g. ``1;5C`` for ctrl+Right."""
    parts = params.split(";")
    modifier = int(parts[1]) - 1 if len(parts) > 1 and parts[1].isdigit() else 0
    shift = bool(modifier & 1)
    alt = bool(modifier & 2)
    ctrl = bool(modifier & 4)

    if final == "~":
        number = int(parts[0]) if parts[0].isdigit() else 0
        code = _TILDE_CODES.get(number, KeyCode.OTHER)
    elif final == "Z":
        return KeyEvent(KeyCode.BACKTAB, shift=True)
    else:
        code = _CSI_FINAL.get(final, KeyCode.OTHER)
    return KeyEvent(code, ctrl=ctrl, alt=alt, shift=shift)


def decode_key(data: bytes) -> tuple[KeyEvent | None, int]:
    """Decode the first key in ``data``.

    Returns:
        The event and the number of bytes it used. ``(None, 0)`` means the
        data ends in the middle of a character or escape sequence and more
        bytes are needed.
    """
    if not data:
        return None, 0

    first = data[0]
    if first == ESC:
        if len(data) == 1:
            return KeyEvent(KeyCode.ESC), 1
        if data[1] in (ord("["), ord("O")):
            end = 2
            while end < len(data) and not 0x40 <= data[end] <= 0x7E:
                end += 1
            if end >= len(data):
                return None, 0
            params = data[2:end].decode("ascii", errors="ignore")
            return _decode_csi(params, chr(data[end])), end + 1

        # ESC followed by a character is alt+character
        event, used = decode_key(data[1:])
        if event is not None and event.code is KeyCode.CHAR:
            return KeyEvent.of_char(event.char, alt=True), used + 1
        return KeyEvent(KeyCode.ESC), 1

    if first in (0x0D, 0x0A):
        return KeyEvent(KeyCode.ENTER), 1
    if first == 0x09:
        return KeyEvent(KeyCode.TAB), 1
    if first in (0x7F, 0x08):
        return KeyEvent(KeyCode.BACKSPACE), 1
    if 0x01 <= first <= 0x1A:
        return KeyEvent.of_char(chr(first + 0x60), ctrl=True), 1
    if first < 0x20:
        return KeyEvent(KeyCode.OTHER), 1

    length = _utf8_length(first)
    if len(data) < length:
        return None, 0
    char = data[:length].decode("utf-8", errors="replace")
    return KeyEvent.of_char(char), length


class KeyboardHandler:
    """Cbreak-mode stdin reader with a bounded poll timeout."""

    def __init__(self, fd: int | None = None):
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.old_settings = None
        self._buffer = b""
        self._setup()

    def _setup(self) -> None:
        """Put the terminal into cbreak mode, remembering the old settings."""
        try:
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error:
            # Not a terminal (piped input)
            self.old_settings = None

    def _fill(self, timeout: float) -> bool:
        ready, _, _ = select.select([self.fd], [], [], timeout)
        if not ready:
            return False
        chunk = os.read(self.fd, 64)
        self._buffer += chunk
        return bool(chunk)

    def read_key(self, timeout: float = 0.2) -> KeyEvent | None:
        """Wait up to ``timeout`` seconds for a key press.

        Returns None when nothing was pressed.
        """
        if not self._buffer and not self._fill(timeout):
            return None

        if self._buffer == bytes([ESC]):
            # Terminals may deliver an escape sequence in more than one read.
            self._fill(SEQUENCE_WAIT_SECONDS)

        event, used = decode_key(self._buffer)
        if used == 0:
            self._fill(SEQUENCE_WAIT_SECONDS)
            event, used = decode_key(self._buffer)
        if used == 0:
            # Still truncated; discard it.
            event, used = KeyEvent(KeyCode.OTHER), len(self._buffer)
        self._buffer = self._buffer[used:]
        return event

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            except termios.error:
                pass

    def resume(self) -> None:
        self._buffer = b""
        self._setup()

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Hand the terminal back in its original mode for the duration."""
        self.stop()
        try:
            yield
        finally:
            self.resume()
