"""Multi-line note buffer for the notes panel."""

from __future__ import annotations

from typing import TYPE_CHECKING

from success_cli.core.view import selected_goal_id
from success_cli.repositories import StorageError
from success_cli.utils.logger import get_logger

if TYPE_CHECKING:
    from success_cli.core.app import AppState

logger = get_logger(__name__)

TAB_TEXT = "    "


class NoteBuffer:
    """Note text with a character-indexed cursor.

    Lines are separated by ``\\n``; the cursor is an offset into the whole
    text and always satisfies ``0 <= cursor <= len(text)``.
    """

    def __init__(self, text: str = ""):
        self.text = text
        self.cursor = len(text)

    def __repr__(self) -> str:
        return f"NoteBuffer(cursor={self.cursor}, length={len(self.text)})"

    def reset(self, text: str) -> None:
        """Replace the content and put the cursor at the end."""
        self.text = text
        self.cursor = len(text)

    def clear(self) -> None:
        self.text = ""
        self.cursor = 0

    def line_col(self) -> tuple[int, int]:
        """Zero-based (line, column) of the cursor."""
        before = self.text[: self.cursor]
        line = before.count("\n")
        col = len(before) - (before.rfind("\n") + 1)
        return line, col

    def line_starts(self) -> list[int]:
        starts = [0]
        for idx, ch in enumerate(self.text):
            if ch == "\n":
                starts.append(idx + 1)
        return starts

    # -- editing ------------------------------------------------------------

    def insert(self, text: str) -> None:
        self.text = self.text[: self.cursor] + text + self.text[self.cursor :]
        self.cursor += len(text)

    def newline(self) -> None:
        self.insert("\n")

    def indent(self) -> None:
        self.insert(TAB_TEXT)

    def delete_backward(self) -> bool:
        """Delete the character before the cursor; False at the start."""
        if self.cursor == 0:
            return False
        self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        self.cursor -= 1
        return True

    # -- motion -------------------------------------------------------------

    def move_left(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_right(self) -> None:
        if self.cursor < len(self.text):
            self.cursor += 1

    def move_word_left(self) -> None:
        idx = self.cursor
        while idx > 0 and self.text[idx - 1].isspace():
            idx -= 1
        while idx > 0 and not self.text[idx - 1].isspace():
            idx -= 1
        self.cursor = idx

    def move_word_right(self) -> None:
        length = len(self.text)
        idx = self.cursor
        while idx < length and self.text[idx].isspace():
            idx += 1
        while idx < length and not self.text[idx].isspace():
            idx += 1
        self.cursor = idx

    def move_vertical(self, delta: int) -> None:
        """Move ``delta`` lines up (negative) or down, keeping the column.

        The column is clamped to the target line's length. Moving past the
        first or last line does nothing.
        """
        starts = self.line_starts()
        line, col = self.line_col()
        target = line + delta
        if target < 0 or target >= len(starts):
            return

        line_start = starts[target]
        if target + 1 < len(starts):
            line_end = starts[target + 1] - 1
        else:
            line_end = len(self.text)
        self.cursor = line_start + min(col, line_end - line_start)


def refresh_notes_for_selection(state: AppState) -> None:
    """Load the note of the selected goal, or clear the panel."""
    goal_id = selected_goal_id(state)
    if goal_id is None:
        state.notes.clear()
        return
    try:
        state.notes.reset(state.store.get_note(goal_id))
    except StorageError as e:
        logger.warning("Could not read note for goal %s: %s", goal_id, e)
        state.notes.reset("")


def save_notes_for_selection(state: AppState) -> None:
    """Write the notes panel back to the selected goal's note."""
    goal_id = selected_goal_id(state)
    if goal_id is None:
        return
    try:
        state.store.edit_note(goal_id, state.notes.text)
    except StorageError as e:
        logger.warning("Could not save note for goal %s: %s", goal_id, e)
        state.status_message = "Failed to save notes"
