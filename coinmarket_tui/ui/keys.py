"""Key events and decoding of raw terminal input sequences."""
from dataclasses import dataclass
from typing import Optional, Tuple

UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
PAGE_UP = "pageup"
PAGE_DOWN = "pagedown"
HOME = "home"
END = "end"
ENTER = "enter"
ESCAPE = "escape"
BACKSPACE = "backspace"
TAB = "tab"
CTRL_C = "ctrl+c"

NAMED_KEYS = frozenset({UP, DOWN, LEFT, RIGHT, PAGE_UP, PAGE_DOWN, HOME, END,
                        ENTER, ESCAPE, BACKSPACE, TAB, CTRL_C})

_ESCAPE_SEQUENCES = {
    "\x1b[A": UP, "\x1bOA": UP,
    "\x1b[B": DOWN, "\x1bOB": DOWN,
    "\x1b[C": RIGHT, "\x1bOC": RIGHT,
    "\x1b[D": LEFT, "\x1bOD": LEFT,
    "\x1b[5~": PAGE_UP,
    "\x1b[6~": PAGE_DOWN,
    "\x1b[H": HOME, "\x1bOH": HOME, "\x1b[1~": HOME, "\x1b[7~": HOME,
    "\x1b[F": END, "\x1bOF": END, "\x1b[4~": END, "\x1b[8~": END,
}

_CONTROL_CHARS = {
    "\r": ENTER,
    "\n": ENTER,
    "\x7f": BACKSPACE,
    "\x08": BACKSPACE,
    "\t": TAB,
    "\x03": CTRL_C,
    "\x1b": ESCAPE,
}

# msvcrt.getwch() reports special keys as a '\x00' or '\xe0' prefix plus a scan code
_WINDOWS_SCAN_CODES = {
    "H": UP, "P": DOWN, "K": LEFT, "M": RIGHT,
    "I": PAGE_UP, "Q": PAGE_DOWN, "G": HOME, "O": END,
}


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """A decoded key press: a named key or a single printable character."""
    key: str

    @property
    def is_char(self) -> bool:
        return self.key not in NAMED_KEYS and len(self.key) == 1 and self.key.isprintable()


def decode_sequence(data: str) -> Optional[KeyEvent]:
    """Decode one raw read from the terminal into a KeyEvent.

    Unknown escape sequences decode to None so they are ignored upstream.
    """
    if not data:
        return None
    if data in _ESCAPE_SEQUENCES:
        return KeyEvent(_ESCAPE_SEQUENCES[data])
    if data in _CONTROL_CHARS:
        return KeyEvent(_CONTROL_CHARS[data])
    if data.startswith("\x1b"):
        return None
    if len(data) == 1 and data.isprintable():
        return KeyEvent(data)
    return None


def split_sequence(data: str) -> Tuple[str, str]:
    """Split the first key's raw sequence off a buffer of pending input.

    A single read can hold several keys (held or pasted keys), so the
    terminal reader decodes them one at a time.
    """
    if not data:
        return "", ""
    if data[0] != "\x1b" or len(data) == 1:
        return data[0], data[1:]
    if data[1] == "[":
        # CSI: parameters then one final byte in the range @ to ~
        for i in range(2, len(data)):
            if "\x40" <= data[i] <= "\x7e":
                return data[:i + 1], data[i + 1:]
        return data, ""
    if data[1] == "O" and len(data) >= 3:
        return data[:3], data[3:]
    return data[0], data[1:]


def decode_windows_scan_code(code: str) -> Optional[KeyEvent]:
    name = _WINDOWS_SCAN_CODES.get(code)
    return KeyEvent(name) if name else None
