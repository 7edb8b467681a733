"""Interaction modes and the in-memory session state they carry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from success_cli.core.text_input import TextInput
from success_cli.models.core import Goal

if TYPE_CHECKING:
    from success_cli.services.process_service import SpawnedProcess


# -- Modes ------------------------------------------------------------------


@dataclass(frozen=True)
class View:
    """Browsing the day's sessions."""


@dataclass(frozen=True)
class PickGoalForSession:
    """Searching for the goal of a new work session."""


@dataclass(frozen=True)
class PickGoalForReward:
    """Searching for the goal of a new reward session."""


@dataclass(frozen=True)
class CreateGoalForm:
    """Filling in the new-goal form (see ``AppState.form_state``)."""


@dataclass(frozen=True)
class QuantityPrompt:
    """Asking how much was achieved in the session that just ended."""

    goal_name: str
    unit_name: str | None = None


@dataclass(frozen=True)
class PickDuration:
    """Entering how long the next session should run."""

    is_reward: bool
    goal_name: str
    goal_id: int


@dataclass(frozen=True)
class RunningTimer:
    """A countdown is active; browsing is still allowed."""


@dataclass(frozen=True)
class EditNotes:
    """Typing directly into the selected goal's notes."""


Mode = (
    View
    | PickGoalForSession
    | PickGoalForReward
    | CreateGoalForm
    | QuantityPrompt
    | PickDuration
    | RunningTimer
    | EditNotes
)

DIALOG_MODES = (
    PickGoalForSession,
    PickGoalForReward,
    CreateGoalForm,
    QuantityPrompt,
    PickDuration,
)


def is_dialog_open(mode: Mode) -> bool:
    """True while a modal dialog owns the input."""
    return isinstance(mode, DIALOG_MODES)


# -- Timer ------------------------------------------------------------------


@dataclass
class TimerSession:
    """The single active countdown."""

    label: str
    goal_id: int
    total_seconds: int
    remaining_seconds: int
    is_reward: bool
    started_at: datetime
    spawned_processes: list[SpawnedProcess] = field(default_factory=list)


@dataclass(frozen=True)
class PendingSession:
    """Snapshot of an expired timer awaiting persistence."""

    label: str
    goal_id: int
    total_seconds: int
    is_reward: bool
    started_at: datetime

    @classmethod
    def from_timer(cls, timer: TimerSession) -> PendingSession:
        return cls(
            label=timer.label,
            goal_id=timer.goal_id,
            total_seconds=timer.total_seconds,
            is_reward=timer.is_reward,
            started_at=timer.started_at,
        )


@dataclass(frozen=True)
class UnsavedSession:
    """A finalized session the storage service refused, queued for retry."""

    pending: PendingSession
    quantity: int | None = None


# -- Goal form --------------------------------------------------------------


class FormField(Enum):
    NAME = 0
    QUANTITY = 1
    COMMANDS = 2

    def next(self) -> FormField:
        members = list(FormField)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> FormField:
        members = list(FormField)
        return members[(members.index(self) - 1) % len(members)]


@dataclass
class FormState:
    """Fields of the create-goal form."""

    goal_name: TextInput
    is_reward: bool
    quantity_name: TextInput = field(default_factory=TextInput)
    commands: TextInput = field(default_factory=TextInput)
    current_field: FormField = FormField.NAME

    @property
    def active_input(self) -> TextInput:
        return {
            FormField.NAME: self.goal_name,
            FormField.QUANTITY: self.quantity_name,
            FormField.COMMANDS: self.commands,
        }[self.current_field]


# -- Search -----------------------------------------------------------------


@dataclass(frozen=True)
class ExistingGoal:
    goal: Goal


@dataclass(frozen=True)
class CreateGoal:
    name: str
    is_reward: bool


SearchResult = ExistingGoal | CreateGoal


# -- View model -------------------------------------------------------------


class ViewItemKind(Enum):
    RUNNING_TIMER = "running_timer"
    EXISTING = "existing"
    ADD_SESSION = "add_session"
    ADD_REWARD = "add_reward"


@dataclass(frozen=True)
class ViewItem:
    """One row of the sessions list.

    ``session_index`` points into the loaded day sessions for EXISTING rows.
    """

    label: str
    kind: ViewItemKind
    session_index: int | None = None


class FocusedBlock(Enum):
    SESSIONS = "sessions"
    NOTES = "notes"
