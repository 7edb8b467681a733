"""Per-mode key handlers.

Each handler receives the single ``AppState`` and the key, mutates the
state and never raises for storage or environment failures: those end up
in the log and the status line.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from success_cli.core.durations import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_DURATION_SUGGESTION,
    format_duration_suggestion,
    parse_commands_input,
    parse_duration,
    parse_optional_quantity,
)
from success_cli.core.notes import refresh_notes_for_selection, save_notes_for_selection
from success_cli.core.text_input import TextInput
from success_cli.core.timer import finalize_session, start_timer
from success_cli.core.view import build_view_items, last_index, selected_goal_id
from success_cli.models import Goal, KeyCode, KeyEvent
from success_cli.models.state import (
    CreateGoal,
    CreateGoalForm,
    EditNotes,
    ExistingGoal,
    FocusedBlock,
    FormState,
    PickDuration,
    PickGoalForReward,
    PickGoalForSession,
    QuantityPrompt,
    RunningTimer,
    SearchResult,
    View,
    ViewItemKind,
)
from success_cli.repositories import StorageError
from success_cli.services.editor_service import (
    EditorError,
    open_archive_in_file_manager,
    open_note_in_editor,
)
from success_cli.utils.logger import get_logger

if TYPE_CHECKING:
    from success_cli.core.app import AppState

logger = get_logger(__name__)


def _base_mode(state: AppState) -> View | RunningTimer:
    """Mode to fall back to when a dialog or the notes editor closes."""
    return RunningTimer() if state.timer is not None else View()


# -- View / RunningTimer ------------------------------------------------------


def handle_view_key(state: AppState, key: KeyEvent) -> None:
    """Navigation, day switching and entry points into the dialogs."""
    if key.code is KeyCode.UP or key.is_char("k"):
        move_selection(state, -1)
    elif key.code is KeyCode.DOWN or key.is_char("j"):
        move_selection(state, 1)
    elif key.code is KeyCode.LEFT or key.is_char("h"):
        shift_day(state, -1)
    elif key.code is KeyCode.RIGHT or key.is_char("l"):
        shift_day(state, 1)
    elif key.is_char("e"):
        if selected_goal_id(state) is not None:
            refresh_notes_for_selection(state)
            state.mode = EditNotes()
            state.focused_block = FocusedBlock.NOTES
    elif key.is_char("E"):
        open_notes_in_external_editor(state)
    elif key.is_char("o"):
        open_archive_in_file_manager(state.archive_path)
    elif key.code is KeyCode.ENTER:
        activate_selected(state)


def handle_timer_key(state: AppState, key: KeyEvent) -> None:
    # Browsing stays available while the countdown runs.
    handle_view_key(state, key)


def move_selection(state: AppState, delta: int) -> None:
    max_idx = last_index(state)
    previous = state.selected
    state.selected = max(0, min(min(state.selected, max_idx) + delta, max_idx))
    if state.selected != previous:
        refresh_notes_for_selection(state)


def shift_day(state: AppState, delta: int) -> None:
    """Move the viewed day by ``delta`` days, never past today."""
    if delta == 0:
        return
    new_day = state.current_day + timedelta(days=delta)
    if new_day > state.today():
        return
    state.load_day(new_day)


def activate_selected(state: AppState) -> None:
    """Enter on a row: the add pseudo-rows open the goal picker."""
    items = build_view_items(state)
    if not 0 <= state.selected < len(items):
        return
    if state.timer is not None:
        return

    match items[state.selected].kind:
        case ViewItemKind.ADD_SESSION:
            state.mode = PickGoalForSession()
        case ViewItemKind.ADD_REWARD:
            state.mode = PickGoalForReward()
        case _:
            return
    state.search_input.clear()
    state.search_selected = 0


def open_notes_in_external_editor(state: AppState) -> None:
    goal_id = selected_goal_id(state)
    if goal_id is None:
        return

    refresh_notes_for_selection(state)
    try:
        open_note_in_editor(state.store.note_path(goal_id), suspend=state.suspend)
    except EditorError as e:
        logger.warning("External editor failed for goal %s: %s", goal_id, e)
        state.status_message = str(e)
    # The editor may have changed the file on disk.
    refresh_notes_for_selection(state)


# -- Goal search --------------------------------------------------------------


def search_results(state: AppState) -> list[tuple[str, SearchResult]]:
    """Matching goals of the current pool plus a trailing "Create" row."""
    query = state.search_input.value.strip()
    is_reward = isinstance(state.mode, PickGoalForReward)

    try:
        goals = state.store.search_goals(query, is_reward=is_reward, sort_by_recent=True)
    except StorageError as e:
        logger.warning("Goal search failed: %s", e)
        goals = []

    results: list[tuple[str, SearchResult]] = [
        (f"{goal.name} (id {goal.id})", ExistingGoal(goal)) for goal in goals
    ]
    if query:
        name = query
    else:
        name = "New reward" if is_reward else "New goal"
    results.append((f"Create: {query}", CreateGoal(name=name, is_reward=is_reward)))
    return results


def handle_search_key(state: AppState, key: KeyEvent) -> None:
    if state.search_input.handle_key(key):
        state.search_selected = 0
        return

    match key.code:
        case KeyCode.ESC:
            state.mode = View()
            state.search_input.clear()
            state.search_selected = 0
        case KeyCode.UP:
            if state.search_selected > 0:
                state.search_selected -= 1
        case KeyCode.DOWN:
            count = len(search_results(state))
            if count:
                state.search_selected = min(state.search_selected + 1, count - 1)
        case KeyCode.ENTER:
            results = search_results(state)
            if not 0 <= state.search_selected < len(results):
                return
            _, result = results[state.search_selected]
            is_reward = isinstance(state.mode, PickGoalForReward)
            state.search_input.clear()
            state.search_selected = 0

            match result:
                case CreateGoal(name=name, is_reward=reward):
                    state.form_state = FormState(goal_name=TextInput(name), is_reward=reward)
                    state.mode = CreateGoalForm()
                case ExistingGoal(goal=goal):
                    state.duration_input = TextInput(duration_suggestion(state, goal))
                    state.mode = PickDuration(
                        is_reward=is_reward, goal_name=goal.name, goal_id=goal.id
                    )


def duration_suggestion(state: AppState, goal: Goal) -> str:
    """Length of the goal's most recent session, or the default."""
    try:
        sessions = state.store.list_sessions_between(None, None)
    except StorageError as e:
        logger.warning("Could not load sessions for duration suggestion: %s", e)
        return DEFAULT_DURATION_SUGGESTION

    previous = [s for s in sessions if s.goal_id == goal.id]
    if not previous:
        return DEFAULT_DURATION_SUGGESTION
    last = max(previous, key=lambda s: s.start_at)
    return format_duration_suggestion(last.duration_seconds // 60)


# -- Create goal form ---------------------------------------------------------


def handle_form_key(state: AppState, key: KeyEvent) -> None:
    form = state.form_state
    if form is None:
        state.mode = View()
        return

    if form.active_input.handle_key(key):
        return

    match key.code:
        case KeyCode.ESC:
            state.form_state = None
            state.mode = View()
        case KeyCode.UP | KeyCode.BACKTAB:
            form.current_field = form.current_field.previous()
        case KeyCode.DOWN | KeyCode.TAB:
            form.current_field = form.current_field.next()
        case KeyCode.ENTER:
            submit_form(state, form)


def submit_form(state: AppState, form: FormState) -> None:
    name = form.goal_name.value.strip()
    if not name:
        return

    quantity_name = form.quantity_name.value.strip() or None
    try:
        created = state.store.add_goal(
            name,
            form.is_reward,
            parse_commands_input(form.commands.value),
            quantity_name,
        )
    except StorageError as e:
        logger.warning("Could not create goal %r: %s", name, e)
        state.status_message = f"Failed to create goal: {e}"
        return

    logger.info("Created goal %s (%s)", created.id, created.name)
    state.goals.append(created)
    state.form_state = None
    state.duration_input = TextInput(DEFAULT_DURATION_SUGGESTION)
    state.mode = PickDuration(
        is_reward=form.is_reward, goal_name=created.name, goal_id=created.id
    )


# -- Duration and quantity prompts --------------------------------------------


def handle_duration_key(state: AppState, key: KeyEvent) -> None:
    if state.duration_input.handle_key(key):
        return

    match key.code:
        case KeyCode.ESC:
            state.duration_input.clear()
            state.mode = View()
        case KeyCode.ENTER:
            mode = state.mode
            if not isinstance(mode, PickDuration):
                return
            seconds = parse_duration(state.duration_input.value) or DEFAULT_DURATION_SECONDS
            start_timer(state, mode.goal_name, mode.goal_id, seconds, mode.is_reward)


def handle_quantity_key(state: AppState, key: KeyEvent) -> None:
    if not isinstance(state.mode, QuantityPrompt):
        return
    if state.quantity_input.handle_key(key):
        return

    match key.code:
        case KeyCode.ESC | KeyCode.ENTER:
            # Skipping the quantity (Esc) still records the session.
            quantity = None
            if key.code is KeyCode.ENTER:
                quantity = parse_optional_quantity(state.quantity_input.value)
            state.quantity_input.clear()
            if state.pending_session is not None:
                finalize_session(state, quantity)
            else:
                state.mode = View()


# -- Notes ----------------------------------------------------------------------


def handle_notes_key(state: AppState, key: KeyEvent) -> None:
    """Edit the notes panel; every change is written through immediately."""
    notes = state.notes
    if key.ctrl:
        if key.code is KeyCode.LEFT:
            notes.move_word_left()
        elif key.code is KeyCode.RIGHT:
            notes.move_word_right()
        return

    match key.code:
        case KeyCode.ESC:
            save_notes_for_selection(state)
            state.mode = _base_mode(state)
            state.focused_block = FocusedBlock.SESSIONS
        case KeyCode.BACKSPACE:
            if notes.delete_backward():
                save_notes_for_selection(state)
        case KeyCode.ENTER:
            notes.newline()
            save_notes_for_selection(state)
        case KeyCode.TAB:
            notes.indent()
            save_notes_for_selection(state)
        case KeyCode.CHAR if key.char:
            notes.insert(key.char)
            save_notes_for_selection(state)
        case KeyCode.LEFT:
            notes.move_left()
        case KeyCode.RIGHT:
            notes.move_right()
        case KeyCode.UP:
            notes.move_vertical(-1)
        case KeyCode.DOWN:
            notes.move_vertical(1)
