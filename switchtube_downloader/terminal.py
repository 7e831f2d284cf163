"""Terminal primitives for the interactive selector.

Raw mode is exposed as a context manager so the saved terminal attributes are
restored on every exit path. Key presses are decoded through static lookup
tables into the closed :class:`Key` enum.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from enum import Enum
from typing import IO, Iterator

# ANSI control sequences
RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GREEN = "\033[32m"
CYAN = "\033[36m"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CLEAR_LINE = "\033[2K"
MOVE_UP = "\033[{}A"

CHECKBOX_CHECKED = "■"
CHECKBOX_UNCHECKED = "□"

ESC = 0x1B
CTRL_C = 0x03
READ_SIZE = 3


class Key(Enum):
    ARROW_UP = "up"
    ARROW_DOWN = "down"
    SPACE = "space"
    ENTER = "enter"
    CTRL_C = "ctrl-c"
    UNKNOWN = "unknown"


SINGLE_BYTE_KEYS = {
    ord("\r"): Key.ENTER,
    ord("\n"): Key.ENTER,
    ord(" "): Key.SPACE,
    CTRL_C: Key.CTRL_C,
    ord("j"): Key.ARROW_DOWN,
    ord("k"): Key.ARROW_UP,
}

# Final byte of "ESC [ <x>"
ESCAPE_SEQUENCES = {
    ord("A"): Key.ARROW_UP,
    ord("B"): Key.ARROW_DOWN,
}


class TerminalError(Exception):
    pass


class RawModeError(TerminalError):
    pass


class KeyReadError(TerminalError):
    pass


def decode_key(data: bytes) -> Key:
    if not data:
        return Key.UNKNOWN
    key = SINGLE_BYTE_KEYS.get(data[0])
    if key is not None:
        return key
    if data[0] == ESC and len(data) >= 3 and data[1] == ord("["):
        return ESCAPE_SEQUENCES.get(data[2], Key.UNKNOWN)
    return Key.UNKNOWN


def read_key(stream: IO) -> Key:
    """Block until the next key press on ``stream`` and decode it.

    Must be called with the terminal in raw mode so a single ``read`` returns
    one key press (an escape sequence arrives as one chunk).
    """
    try:
        data = os.read(stream.fileno(), READ_SIZE)
    except (OSError, ValueError) as e:
        raise KeyReadError(f"failed to read key: {e}") from e
    if not data:
        raise KeyReadError("failed to read key: end of input")
    return decode_key(data)


def is_terminal(stream: IO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


@contextmanager
def raw_mode(stream: IO) -> Iterator[None]:
    """Switch ``stream`` into raw mode, restoring the previous mode on exit."""
    try:
        import termios
        import tty
    except ImportError as e:
        raise RawModeError("raw mode is not supported on this platform") from e

    try:
        fd = stream.fileno()
        saved = termios.tcgetattr(fd)
        tty.setraw(fd)
    except (termios.error, OSError, ValueError) as e:
        raise RawModeError(f"failed to set raw mode: {e}") from e
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


__all__ = [
    "Key",
    "decode_key",
    "read_key",
    "is_terminal",
    "raw_mode",
    "TerminalError",
    "RawModeError",
    "KeyReadError",
]
