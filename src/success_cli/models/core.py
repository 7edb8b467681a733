"""Goal and session records returned by the storage service."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SessionKind(str, Enum):
    """Whether a session was goal work or a reward."""

    GOAL = "goal"
    REWARD = "reward"


class Goal(BaseModel):
    """A named unit of work or reward.

    Attributes:
        id: Stable identifier assigned by the storage service
        name: Display name
        is_reward: True for goals in the reward pool
        commands: Shell commands launched while a session for this goal runs
        quantity_name: Unit tracked per session (e.g. "pages"), if any
        created_at: Creation timestamp
    """

    id: int
    name: str
    is_reward: bool = False
    commands: list[str] = Field(default_factory=list)
    quantity_name: str | None = None
    created_at: datetime | None = None


class Session(BaseModel):
    """A persisted, completed goal or reward interval.

    Attributes:
        id: Identifier assigned by the storage service
        goal_id: Goal this session belongs to
        name: Label the session was recorded with
        kind: Goal work or reward
        start_at: Start timestamp (timezone aware)
        end_at: End timestamp (timezone aware)
        quantity: Optional amount achieved, in the goal's quantity unit
    """

    id: int
    goal_id: int
    name: str
    kind: SessionKind
    start_at: datetime
    end_at: datetime
    quantity: int | None = None

    @property
    def duration_seconds(self) -> int:
        """Length of the session in whole seconds."""
        return int((self.end_at - self.start_at).total_seconds())
