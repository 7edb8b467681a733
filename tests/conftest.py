"""Shared test fixtures and configuration.

Provides an in-memory storage service and a controllable clock so the
session state machine can be driven without a database or real time.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from success_cli.core.app import AppState
from success_cli.models import Goal, KeyCode, KeyEvent, Session, SessionKind
from success_cli.repositories import GoalStore, StorageError

# Noon local time keeps every test well away from a day boundary.
BASE_TIME = datetime(2024, 5, 1, 12, 0).astimezone().astimezone(UTC)


class FakeClock:
    """Callable clock returning a settable aware UTC time."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeStore(GoalStore):
    """In-memory GoalStore with switchable failures."""

    def __init__(self, root: Path):
        self.root = root
        self.goals: list[Goal] = []
        self.sessions: list[Session] = []
        self.notes: dict[int, str] = {}
        self.fail_add_session = False
        self.fail_add_goal = False
        self.fail_queries = False
        self.add_session_calls = 0

    def _check_queries(self) -> None:
        if self.fail_queries:
            raise StorageError("database is locked")

    def list_goals(self, is_reward: bool | None = None) -> list[Goal]:
        self._check_queries()
        return [g for g in self.goals if is_reward is None or g.is_reward == is_reward]

    def search_goals(self, query, is_reward=None, limit=None, sort_by_recent=True):
        self._check_queries()
        last = {s.goal_id: s.start_at for s in self.sessions}
        matches = [g for g in self.list_goals(is_reward) if query.lower() in g.name.lower()]
        matches.sort(
            key=lambda g: (last.get(g.id, datetime.min.replace(tzinfo=UTC)), g.id),
            reverse=True,
        )
        return matches[:limit] if limit is not None else matches

    def add_goal(self, name, is_reward, commands, quantity_name=None) -> Goal:
        if self.fail_add_goal:
            raise StorageError("disk full")
        goal = Goal(
            id=len(self.goals) + 1,
            name=name,
            is_reward=is_reward,
            commands=commands,
            quantity_name=quantity_name,
        )
        self.goals.append(goal)
        return goal

    def list_day_sessions(self, day: date) -> list[Session]:
        self._check_queries()
        return [s for s in self.sessions if s.start_at.astimezone().date() == day]

    def list_sessions_between(self, start=None, end=None) -> list[Session]:
        self._check_queries()
        return [
            s
            for s in self.sessions
            if (start is None or s.start_at >= start) and (end is None or s.start_at < end)
        ]

    def add_session(
        self, goal_id, name, start_at, duration_seconds, is_reward, quantity=None
    ) -> Session:
        self.add_session_calls += 1
        if self.fail_add_session:
            raise StorageError("database is locked")
        session = Session(
            id=len(self.sessions) + 1,
            goal_id=goal_id,
            name=name,
            kind=SessionKind.REWARD if is_reward else SessionKind.GOAL,
            start_at=start_at,
            end_at=start_at + timedelta(seconds=duration_seconds),
            quantity=quantity,
        )
        self.sessions.append(session)
        return session

    def get_note(self, goal_id: int) -> str:
        self._check_queries()
        return self.notes.get(goal_id, "")

    def edit_note(self, goal_id: int, content: str) -> None:
        self.notes[goal_id] = content

    def note_path(self, goal_id: int) -> Path:
        return self.root / "notes" / f"goal_{goal_id}.md"


def key(code: KeyCode, **kwargs) -> KeyEvent:
    return KeyEvent(code, **kwargs)


def char(c: str, **kwargs) -> KeyEvent:
    return KeyEvent.of_char(c, **kwargs)


def type_text(app: AppState, text: str) -> None:
    for c in text:
        app.handle_input(char(c))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(tmp_path) -> FakeStore:
    return FakeStore(tmp_path)


@pytest.fixture()
def make_app(store, clock, tmp_path):
    """Factory so tests can seed the store before the state loads it."""

    def _make() -> AppState:
        return AppState(store, tmp_path, clock=clock)

    return _make


@pytest.fixture()
def app(make_app) -> AppState:
    return make_app()
