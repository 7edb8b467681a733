"""Tests for the multi-line note buffer and note load/save helpers."""

from __future__ import annotations

from success_cli.core.notes import NoteBuffer, refresh_notes_for_selection, save_notes_for_selection


class TestNoteBuffer:
    def test_line_col(self):
        buf = NoteBuffer("ab\ncde\nf")
        buf.cursor = 5
        assert buf.line_col() == (1, 2)

    def test_line_col_at_start_of_line(self):
        buf = NoteBuffer("ab\ncd")
        buf.cursor = 3
        assert buf.line_col() == (1, 0)

    def test_move_up_keeps_column(self):
        buf = NoteBuffer("hello\nworld")
        buf.cursor = 9  # "wor|ld"
        buf.move_vertical(-1)
        assert buf.cursor == 3

    def test_move_down_clamps_column(self):
        buf = NoteBuffer("a long line\nab")
        buf.cursor = 8
        buf.move_vertical(1)
        assert buf.cursor == len(buf.text)

    def test_move_up_clamps_to_shorter_middle_line(self):
        buf = NoteBuffer("abc\nx\nabcdef")
        buf.cursor = len(buf.text)
        buf.move_vertical(-1)
        assert buf.line_col() == (1, 1)
        assert buf.cursor == 5

    def test_vertical_motion_past_edges_is_noop(self):
        buf = NoteBuffer("one\ntwo")
        buf.move_vertical(1)
        assert buf.cursor == 7
        buf.cursor = 1
        buf.move_vertical(-1)
        assert buf.cursor == 1

    def test_word_motion_crosses_lines(self):
        buf = NoteBuffer("first\nsecond")
        buf.move_word_left()
        assert buf.cursor == 6
        buf.move_word_left()
        assert buf.cursor == 0
        buf.move_word_right()
        assert buf.cursor == 5

    def test_edits(self):
        buf = NoteBuffer("ab")
        buf.newline()
        buf.indent()
        buf.insert("é")
        assert buf.text == "ab\n    é"
        assert buf.delete_backward() is True
        assert buf.text == "ab\n    "

    def test_delete_backward_at_start(self):
        buf = NoteBuffer("ab")
        buf.cursor = 0
        assert buf.delete_backward() is False
        assert buf.text == "ab"

    def test_left_right_bounds(self):
        buf = NoteBuffer("a")
        buf.move_right()
        assert buf.cursor == 1
        buf.move_left()
        buf.move_left()
        assert buf.cursor == 0

    def test_reset_moves_cursor_to_end(self):
        buf = NoteBuffer()
        buf.reset("new text")
        assert buf.cursor == 8


class TestNotePersistence:
    def test_refresh_loads_selected_goal_note(self, store, make_app, clock):
        goal = store.add_goal("Read", False, [])
        store.add_session(goal.id, "Read", clock(), 600, False)
        store.notes[goal.id] = "chapter 3"

        app = make_app()
        app.selected = 0
        refresh_notes_for_selection(app)
        assert app.notes.text == "chapter 3"
        assert app.notes.cursor == len("chapter 3")

    def test_refresh_clears_without_goal(self, app):
        app.notes.reset("stale")
        refresh_notes_for_selection(app)
        assert app.notes.text == ""

    def test_refresh_survives_storage_failure(self, store, make_app, clock):
        goal = store.add_goal("Read", False, [])
        store.add_session(goal.id, "Read", clock(), 600, False)
        app = make_app()
        app.selected = 0
        store.fail_queries = True
        refresh_notes_for_selection(app)
        assert app.notes.text == ""

    def test_save_writes_selected_goal_note(self, store, make_app, clock):
        goal = store.add_goal("Read", False, [])
        store.add_session(goal.id, "Read", clock(), 600, False)
        app = make_app()
        app.selected = 0
        app.notes.reset("updated")
        save_notes_for_selection(app)
        assert store.notes[goal.id] == "updated"
