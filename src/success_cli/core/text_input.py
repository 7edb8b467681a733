"""Single-line text buffer shared by every input field."""

from success_cli.models.keys import KeyCode, KeyEvent


class TextInput:
    """Text with a cursor addressed in characters (code points).

    The cursor always satisfies ``0 <= cursor <= len(value)``.
    """

    def __init__(self, value: str = ""):
        self.value = value
        self.cursor = len(value)

    def __repr__(self) -> str:
        return f"TextInput(value={self.value!r}, cursor={self.cursor})"

    def handle_key(self, key: KeyEvent) -> bool:
        """Apply an editing key.

        Returns True if the key was consumed, False to let the caller handle
        it (Enter, Esc, Tab, Up/Down, ...).
        """
        match key.code:
            case KeyCode.CHAR if not key.ctrl and not key.alt and key.char:
                self.insert(key.char)
            case KeyCode.BACKSPACE:
                self.delete_backward()
            case KeyCode.DELETE:
                self.delete_forward()
            case KeyCode.LEFT:
                if key.ctrl:
                    self.move_word_left()
                else:
                    self.move_left()
            case KeyCode.RIGHT:
                if key.ctrl:
                    self.move_word_right()
                else:
                    self.move_right()
            case KeyCode.HOME:
                self.move_home()
            case KeyCode.END:
                self.move_end()
            case _:
                return False
        return True

    def insert(self, text: str) -> None:
        self.value = self.value[: self.cursor] + text + self.value[self.cursor :]
        self.cursor += len(text)

    def delete_backward(self) -> None:
        if self.cursor == 0:
            return
        self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
        self.cursor -= 1

    def delete_forward(self) -> None:
        if self.cursor >= len(self.value):
            return
        self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]

    def move_left(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_right(self) -> None:
        if self.cursor < len(self.value):
            self.cursor += 1

    def move_word_left(self) -> None:
        idx = self.cursor
        while idx > 0 and self.value[idx - 1].isspace():
            idx -= 1
        while idx > 0 and not self.value[idx - 1].isspace():
            idx -= 1
        self.cursor = idx

    def move_word_right(self) -> None:
        # Mirror of move_word_left: leading whitespace first, then the word.
        length = len(self.value)
        idx = self.cursor
        while idx < length and self.value[idx].isspace():
            idx += 1
        while idx < length and not self.value[idx].isspace():
            idx += 1
        self.cursor = idx

    def move_home(self) -> None:
        self.cursor = 0

    def move_end(self) -> None:
        self.cursor = len(self.value)

    def clear(self) -> None:
        self.value = ""
        self.cursor = 0
