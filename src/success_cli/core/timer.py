"""Wall-clock countdown and session finalization.

Remaining time is always recomputed from the absolute start timestamp, so a
suspended machine or a stopped process does not pause the countdown.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from success_cli.core.notes import refresh_notes_for_selection, save_notes_for_selection
from success_cli.core.view import goal_quantity_name, last_index
from success_cli.models import Session
from success_cli.models.state import (
    EditNotes,
    FocusedBlock,
    PendingSession,
    QuantityPrompt,
    RunningTimer,
    TimerSession,
    UnsavedSession,
    View,
)
from success_cli.repositories import StorageError
from success_cli.services.process_service import kill_spawned, spawn_commands
from success_cli.utils.logger import get_logger

if TYPE_CHECKING:
    from success_cli.core.app import AppState

logger = get_logger(__name__)

RETRY_INTERVAL_SECONDS = 30


def tick_timer(state: AppState) -> None:
    """Recompute the remaining time and finish the timer at zero."""
    timer = state.timer
    if timer is None:
        return

    elapsed = int((state.clock() - timer.started_at).total_seconds())
    if elapsed < 0:
        # Clock went backwards; wait for it to catch up.
        return

    timer.remaining_seconds = max(timer.total_seconds - elapsed, 0)
    if timer.remaining_seconds == 0:
        finish_timer(state)


def start_timer(
    state: AppState,
    goal_name: str,
    goal_id: int,
    seconds: int,
    is_reward: bool,
) -> None:
    """Start the countdown for a goal; a no-op while another timer runs."""
    if state.timer is not None:
        return

    today = state.today()
    if state.current_day != today:
        state.load_day(today)

    started_at = state.clock()
    append_session_header(state, goal_id, started_at)

    goal = state.find_goal(goal_id)
    commands = goal.commands if goal is not None else []

    state.timer = TimerSession(
        label=goal_name,
        goal_id=goal_id,
        total_seconds=seconds,
        remaining_seconds=seconds,
        is_reward=is_reward,
        started_at=started_at,
        spawned_processes=spawn_commands(commands),
    )
    state.selected = last_index(state)
    refresh_notes_for_selection(state)
    state.mode = RunningTimer()
    state.focused_block = FocusedBlock.SESSIONS
    logger.info(
        "Started %s timer for goal %s (%s) for %ss",
        "reward" if is_reward else "goal",
        goal_id,
        goal_name,
        seconds,
    )


def append_session_header(state: AppState, goal_id: int, started_at: datetime) -> None:
    """Append a ``---`` separator and the local start time to the goal's note."""
    stamp = started_at.astimezone().strftime("%Y-%m-%d %H:%M")
    try:
        note = state.store.get_note(goal_id)
        state.store.edit_note(goal_id, f"{note}---\n{stamp}\n")
    except StorageError as e:
        logger.warning("Could not append session header for goal %s: %s", goal_id, e)


def finish_timer(state: AppState) -> None:
    """Hand an expired timer over to the finalizer, exactly once."""
    if state.timer is None:
        return

    # Notes belong to the timer row, so flush them before the row goes away.
    if isinstance(state.mode, EditNotes):
        save_notes_for_selection(state)

    timer = state.timer
    state.timer = None

    # Helpers keep running after goal work; only a reward's end stops them.
    if timer.is_reward:
        kill_spawned(timer.spawned_processes)

    logger.info("Timer finished for goal %s (%s)", timer.goal_id, timer.label)
    state.pending_session = PendingSession.from_timer(timer)

    quantity_name = goal_quantity_name(state, timer.goal_id)
    if quantity_name is not None:
        state.quantity_input.clear()
        state.mode = QuantityPrompt(goal_name=timer.label, unit_name=quantity_name)
        state.focused_block = FocusedBlock.SESSIONS
    else:
        finalize_session(state, None)


def finalize_session(state: AppState, quantity: int | None = None) -> Session | None:
    """Persist the pending session and return to View.

    The pending session is consumed by the first call; later calls do
    nothing. Returns the created session, or None if nothing was stored.
    """
    pending = state.pending_session
    if pending is None:
        return None
    state.pending_session = None

    if isinstance(state.mode, EditNotes):
        save_notes_for_selection(state)

    state.mode = View()
    state.focused_block = FocusedBlock.SESSIONS

    created = persist_session(state, pending, quantity)
    if created is not None:
        reload_if_viewing(state, created)
    return created


def persist_session(
    state: AppState, pending: PendingSession, quantity: int | None
) -> Session | None:
    """Store a session, queueing it for retry when the store fails."""
    try:
        created = state.store.add_session(
            goal_id=pending.goal_id,
            name=pending.label,
            start_at=pending.started_at,
            duration_seconds=pending.total_seconds,
            is_reward=pending.is_reward,
            quantity=quantity,
        )
    except StorageError as e:
        logger.warning("Could not save session for goal %s, queued for retry: %s", pending.goal_id, e)
        state.unsaved_sessions.append(UnsavedSession(pending, quantity))
        state.last_retry_at = state.clock()
        state.status_message = f"Session not saved, will retry: {e}"
        return None

    logger.info("Saved session %s for goal %s", created.id, created.goal_id)
    return created


def reload_if_viewing(state: AppState, created: Session) -> None:
    if created.start_at.astimezone().date() == state.current_day:
        state.load_day(state.current_day)


def retry_unsaved_sessions(state: AppState) -> None:
    """Retry queued sessions, at most once per ``RETRY_INTERVAL_SECONDS``.

    Each entry leaves the queue on its first successful write.
    """
    if not state.unsaved_sessions:
        return

    now = state.clock()
    if (
        state.last_retry_at is not None
        and (now - state.last_retry_at).total_seconds() < RETRY_INTERVAL_SECONDS
    ):
        return
    state.last_retry_at = now

    saved = 0
    for entry in list(state.unsaved_sessions):
        pending = entry.pending
        try:
            created = state.store.add_session(
                goal_id=pending.goal_id,
                name=pending.label,
                start_at=pending.started_at,
                duration_seconds=pending.total_seconds,
                is_reward=pending.is_reward,
                quantity=entry.quantity,
            )
        except StorageError as e:
            logger.warning("Retry failed for session of goal %s: %s", pending.goal_id, e)
            continue

        state.unsaved_sessions.remove(entry)
        saved += 1
        logger.info("Saved queued session %s for goal %s", created.id, created.goal_id)
        if isinstance(state.mode, (View, RunningTimer)):
            reload_if_viewing(state, created)

    if saved:
        state.status_message = f"Saved {saved} queued session(s)"
