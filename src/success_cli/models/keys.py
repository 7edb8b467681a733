"""Frontend-independent key events.

Every frontend converts its native key events into ``KeyEvent`` before
handing them to ``AppState.handle_input``.
"""

from dataclasses import dataclass
from enum import Enum


class KeyCode(Enum):
    """Abstract key code."""

    CHAR = "char"
    BACKSPACE = "backspace"
    ENTER = "enter"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    TAB = "tab"
    BACKTAB = "backtab"
    DELETE = "delete"
    HOME = "home"
    END = "end"
    ESC = "esc"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    ``char`` is only set when ``code`` is ``KeyCode.CHAR``.
    """

    code: KeyCode
    char: str | None = None
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @classmethod
    def of_char(cls, char: str, ctrl: bool = False, alt: bool = False) -> "KeyEvent":
        """Build a character key event."""
        return cls(KeyCode.CHAR, char=char, ctrl=ctrl, alt=alt)

    @classmethod
    def of(cls, code: KeyCode, ctrl: bool = False, shift: bool = False) -> "KeyEvent":
        """Build a non-character key event."""
        return cls(code, ctrl=ctrl, shift=shift)

    def is_char(self, char: str) -> bool:
        """True for a plain (no ctrl/alt) press of ``char``."""
        return (
            self.code is KeyCode.CHAR
            and self.char == char
            and not self.ctrl
            and not self.alt
        )

    def is_ctrl_c(self) -> bool:
        return self.ctrl and self.code is KeyCode.CHAR and self.char in ("c", "C")
