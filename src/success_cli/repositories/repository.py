"""Storage abstraction for Success CLI.

The application core only talks to a ``GoalStore``. Concrete adapters (the
local SQLite archive, or an in-memory fake in tests) implement it, keeping the
session state machine independent of how goals, sessions and notes are kept.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path

from success_cli.models import Goal, Session


class StorageError(Exception):
    """Raised by a GoalStore when an operation cannot be completed."""


class GoalStore(ABC):
    """Synchronous goal, session and note persistence.

    Every method may raise ``StorageError``.
    """

    @abstractmethod
    def list_goals(self, is_reward: bool | None = None) -> list[Goal]:
        """List goals, optionally only those of one pool.

        Args:
            is_reward: True for rewards, False for work goals, None for both

        Returns:
            Goals ordered by id
        """
        raise NotImplementedError("GoalStore.list_goals() must be implemented by adapter")

    @abstractmethod
    def search_goals(
        self,
        query: str,
        is_reward: bool | None = None,
        limit: int | None = None,
        sort_by_recent: bool = True,
    ) -> list[Goal]:
        """Fuzzy-search goals by name.

        Args:
            query: Text typed by the user; empty matches every goal
            is_reward: Restrict to one pool, or None for both
            limit: Maximum number of results
            sort_by_recent: Break score ties by most recent session

        Returns:
            Best matches first
        """
        raise NotImplementedError("GoalStore.search_goals() must be implemented by adapter")

    @abstractmethod
    def add_goal(
        self,
        name: str,
        is_reward: bool,
        commands: list[str],
        quantity_name: str | None = None,
    ) -> Goal:
        """Create a goal and return it with its assigned id."""
        raise NotImplementedError("GoalStore.add_goal() must be implemented by adapter")

    @abstractmethod
    def list_day_sessions(self, day: date) -> list[Session]:
        """List sessions starting on a local calendar day, oldest first."""
        raise NotImplementedError(
            "GoalStore.list_day_sessions() must be implemented by adapter"
        )

    @abstractmethod
    def list_sessions_between(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Session]:
        """List sessions with ``start <= start_at < end``; None bounds are open."""
        raise NotImplementedError(
            "GoalStore.list_sessions_between() must be implemented by adapter"
        )

    @abstractmethod
    def add_session(
        self,
        goal_id: int,
        name: str,
        start_at: datetime,
        duration_seconds: int,
        is_reward: bool,
        quantity: int | None = None,
    ) -> Session:
        """Record a completed session."""
        raise NotImplementedError("GoalStore.add_session() must be implemented by adapter")

    @abstractmethod
    def get_note(self, goal_id: int) -> str:
        """Return the goal's note text (empty if none was written yet)."""
        raise NotImplementedError("GoalStore.get_note() must be implemented by adapter")

    @abstractmethod
    def edit_note(self, goal_id: int, content: str) -> None:
        """Replace the goal's note text."""
        raise NotImplementedError("GoalStore.edit_note() must be implemented by adapter")

    @abstractmethod
    def note_path(self, goal_id: int) -> Path:
        """Location of the goal's note file, for external editors."""
        raise NotImplementedError("GoalStore.note_path() must be implemented by adapter")
