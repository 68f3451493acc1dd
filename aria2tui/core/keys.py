"""
Decoding of raw terminal input into key events.
"""

from enum import Enum


class Key(str, Enum):
    UP = "<up>"
    DOWN = "<down>"
    LEFT = "<left>"
    RIGHT = "<right>"
    ENTER = "<enter>"
    ESCAPE = "<escape>"
    BACKSPACE = "<backspace>"
    INTERRUPT = "<interrupt>"


_CSI_KEYS = {"A": Key.UP, "B": Key.DOWN, "C": Key.RIGHT, "D": Key.LEFT}


def is_text_key(key: str) -> bool:
    """True for a single printable character typed by the user."""
    return not isinstance(key, Key) and len(key) == 1 and key.isprintable()


def decode_keys(data: str) -> list[str]:
    """
    Splits a chunk read from the terminal into keys.

    Named keys are returned as `Key` members and printable characters as plain
    one-character strings. Unrecognised escape sequences and other control
    characters are dropped. A chunk can hold several keys when text is pasted.
    """
    keys: list[str] = []
    i = 0
    length = len(data)
    while i < length:
        ch = data[i]
        if ch == "\x1b":
            if i + 1 < length and data[i + 1] in "[O":
                # CSI / SS3: parameters, then a final byte in '@'..'~'
                j = i + 2
                while j < length and not "@" <= data[j] <= "~":
                    j += 1
                if j < length and data[j] in _CSI_KEYS:
                    keys.append(_CSI_KEYS[data[j]])
                i = j + 1
                continue
            keys.append(Key.ESCAPE)
            i += 1
            continue
        if ch == "\r":
            keys.append(Key.ENTER)
            i += 2 if data[i + 1 : i + 2] == "\n" else 1
            continue
        if ch == "\n":
            keys.append(Key.ENTER)
        elif ch in ("\x7f", "\x08"):
            keys.append(Key.BACKSPACE)
        elif ch == "\x03":
            keys.append(Key.INTERRUPT)
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys
