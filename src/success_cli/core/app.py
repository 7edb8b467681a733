"""Application state and the frontend-facing entry points."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import UTC, date, datetime
from pathlib import Path

from success_cli.core import handlers
from success_cli.core.notes import NoteBuffer, refresh_notes_for_selection
from success_cli.core.text_input import TextInput
from success_cli.core.timer import retry_unsaved_sessions, tick_timer
from success_cli.core.view import build_view_items, last_index
from success_cli.models import Goal, KeyEvent, Session
from success_cli.models.state import (
    CreateGoalForm,
    EditNotes,
    FocusedBlock,
    FormState,
    Mode,
    PendingSession,
    PickDuration,
    PickGoalForReward,
    PickGoalForSession,
    QuantityPrompt,
    RunningTimer,
    SearchResult,
    TimerSession,
    UnsavedSession,
    View,
    ViewItem,
    is_dialog_open,
)
from success_cli.repositories import GoalStore, StorageError
from success_cli.services.process_service import kill_spawned
from success_cli.utils.logger import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class AppState:
    """Everything the session state machine owns.

    A frontend constructs one instance, feeds it ``KeyEvent``s through
    ``handle_input``, calls ``tick`` on every poll cycle and renders
    ``build_view``. ``shutdown`` must run on exit.
    """

    def __init__(
        self,
        store: GoalStore,
        archive_path: str | Path,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the state and load today's sessions.

        Args:
            store: Storage service for goals, sessions and notes
            archive_path: Archive directory (opened with the file manager)
            clock: Returns the current aware time; injectable for tests
        """
        self.store = store
        self.archive_path = Path(archive_path)
        self.clock = clock
        self.status_message: str | None = None

        self.goals: list[Goal] = self._load_goals()
        self.sessions: list[Session] = []
        self.current_day: date = self.today()
        self.selected = 0
        self.mode: Mode = View()
        self.focused_block = FocusedBlock.SESSIONS

        self.search_input = TextInput()
        self.search_selected = 0
        self.duration_input = TextInput()
        self.quantity_input = TextInput()
        self.form_state: FormState | None = None
        self.notes = NoteBuffer()

        self.timer: TimerSession | None = None
        self.pending_session: PendingSession | None = None
        self.unsaved_sessions: list[UnsavedSession] = []
        self.last_retry_at: datetime | None = None

        # Set by the frontend to release the terminal around the editor.
        self.suspend: Callable[[], AbstractContextManager] | None = None

        self.load_day(self.current_day)

    def __repr__(self) -> str:
        return f"AppState(archive={self.archive_path}, day={self.current_day}, mode={self.mode})"

    # -- loading ------------------------------------------------------------

    def _load_goals(self) -> list[Goal]:
        try:
            return self.store.list_goals()
        except StorageError as e:
            logger.warning("Could not load goals: %s", e)
            self.status_message = "Failed to load goals"
            return []

    def today(self) -> date:
        """Current local calendar day according to the clock."""
        return self.clock().astimezone().date()

    def find_goal(self, goal_id: int) -> Goal | None:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None

    def load_day(self, day: date) -> None:
        """Show ``day``: reload its sessions, select the last row, refresh notes."""
        self.current_day = day
        try:
            self.sessions = self.store.list_day_sessions(day)
        except StorageError as e:
            logger.warning("Could not load sessions for %s: %s", day, e)
            self.status_message = f"Failed to load sessions for {day}"
            self.sessions = []
        self.selected = last_index(self)
        refresh_notes_for_selection(self)

    # -- frontend interface -------------------------------------------------

    def handle_input(self, key: KeyEvent) -> bool:
        """Dispatch a key to the handler of the current mode.

        Returns:
            True if the application should quit
        """
        self.status_message = None
        if key.is_ctrl_c():
            return True

        match self.mode:
            case View() | RunningTimer() if key.is_char("q"):
                return True
            case View():
                handlers.handle_view_key(self, key)
            case RunningTimer():
                handlers.handle_timer_key(self, key)
            case PickGoalForSession() | PickGoalForReward():
                handlers.handle_search_key(self, key)
            case CreateGoalForm():
                handlers.handle_form_key(self, key)
            case PickDuration():
                handlers.handle_duration_key(self, key)
            case QuantityPrompt():
                handlers.handle_quantity_key(self, key)
            case EditNotes():
                handlers.handle_notes_key(self, key)
        return False

    def tick(self) -> None:
        """Advance the timer and retry any unsaved sessions."""
        tick_timer(self)
        retry_unsaved_sessions(self)

    def build_view(self, width: int = 20) -> list[ViewItem]:
        return build_view_items(self, width)

    def is_dialog_open(self) -> bool:
        return is_dialog_open(self.mode)

    def search_results(self) -> list[tuple[str, SearchResult]]:
        return handlers.search_results(self)

    def shutdown(self) -> None:
        """Tear down helpers of an active timer and report lost sessions."""
        if self.timer is not None:
            logger.info("Exiting with a running timer for goal %s", self.timer.goal_id)
            kill_spawned(self.timer.spawned_processes)
            self.timer = None

        for entry in self.unsaved_sessions:
            pending = entry.pending
            logger.error(
                "Unsaved session lost on exit: goal_id=%s name=%r start=%s "
                "duration=%ss reward=%s quantity=%s",
                pending.goal_id,
                pending.label,
                pending.started_at.isoformat(),
                pending.total_seconds,
                pending.is_reward,
                entry.quantity,
            )
