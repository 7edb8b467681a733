"""SQLite implementation of GoalStore.

An archive is a directory holding ``success.db`` and a ``notes/`` folder with
one Markdown file per goal, so notes stay editable with any text editor.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, date, datetime, time, timedelta
from pathlib import Path
from typing import Any

from success_cli.adapters.sqlite.connection import get_connection
from success_cli.models import Goal, Session, SessionKind
from success_cli.repositories import GoalStore, StorageError

NOTES_DIR = "notes"


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (sqlite3.Error, OSError, ValueError) as e:
        raise StorageError(f"Failed to {action}: {e}") from e


def fuzzy_score(query: str, name: str) -> int | None:
    """Score ``name`` against ``query`` as an ordered subsequence match.

    Contiguous runs, a match at the very start and matches at word starts
    score higher. Returns None when ``query`` is not a subsequence of ``name``.
    """
    query = query.lower()
    name_lower = name.lower()
    if not query:
        return 0

    score = 0
    pos = 0
    prev_match = -2
    for ch in query:
        if ch.isspace():
            continue
        idx = name_lower.find(ch, pos)
        if idx < 0:
            return None
        score += 1
        if idx == prev_match + 1:
            score += 5
        if idx == 0:
            score += 10
        elif not name_lower[idx - 1].isalnum():
            score += 3
        prev_match = idx
        pos = idx + 1

    # Prefer tighter names for the same matches
    return score * 100 - len(name_lower)


def _to_timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.astimezone()
    return int(value.timestamp())


def _from_timestamp(value: int) -> datetime:
    return datetime.fromtimestamp(value, UTC)


def local_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Aware start (inclusive) and end (exclusive) of a local calendar day."""
    start = datetime.combine(day, time.min).astimezone()
    end = datetime.combine(day + timedelta(days=1), time.min).astimezone()
    return start, end


class SqliteGoalStore(GoalStore):
    """Goals, sessions and notes kept inside an archive directory."""

    def __init__(self, archive: str | Path, connection: sqlite3.Connection | None = None):
        """Initialize the store.

        Args:
            archive: Archive directory; created on first use
            connection: Pre-opened connection (tests); defaults to the
                archive's ``success.db``
        """
        self.archive = Path(archive)
        self._connection = connection

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            with _storage_errors("open archive database"):
                try:
                    self._connection = get_connection(self.archive)
                except RuntimeError as e:
                    # Raised by a failed schema migration
                    raise StorageError(f"Failed to migrate archive database: {e}") from e
        return self._connection

    # -- goals --------------------------------------------------------------

    def _row_to_goal(self, row: sqlite3.Row) -> Goal:
        return Goal(
            id=row["id"],
            name=row["name"],
            is_reward=bool(row["is_reward"]),
            commands=json.loads(row["commands"] or "[]"),
            quantity_name=row["quantity_name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def list_goals(self, is_reward: bool | None = None) -> list[Goal]:
        query = "SELECT * FROM goals"
        params: list[Any] = []
        if is_reward is not None:
            query += " WHERE is_reward = ?"
            params.append(int(is_reward))
        query += " ORDER BY id"

        with _storage_errors("list goals"):
            rows = self.connection.execute(query, params).fetchall()
            return [self._row_to_goal(row) for row in rows]

    def _last_session_starts(self) -> dict[int, int]:
        rows = self.connection.execute(
            "SELECT goal_id, MAX(start_at) AS last_start FROM sessions GROUP BY goal_id"
        ).fetchall()
        return {row["goal_id"]: row["last_start"] for row in rows}

    def search_goals(
        self,
        query: str,
        is_reward: bool | None = None,
        limit: int | None = None,
        sort_by_recent: bool = True,
    ) -> list[Goal]:
        goals = self.list_goals(is_reward)
        with _storage_errors("search goals"):
            last_starts = self._last_session_starts() if sort_by_recent else {}

        scored = []
        for goal in goals:
            score = fuzzy_score(query.strip(), goal.name)
            if score is not None:
                scored.append((score, last_starts.get(goal.id, 0), goal.id, goal))

        # Highest score, then most recently used, then newest goal
        scored.sort(key=lambda item: (item[0], item[1], item[2]), reverse=True)
        results = [item[3] for item in scored]
        if limit is not None:
            results = results[:limit]
        return results

    def add_goal(
        self,
        name: str,
        is_reward: bool,
        commands: list[str],
        quantity_name: str | None = None,
    ) -> Goal:
        name = name.strip()
        if not name:
            raise StorageError("Goal name must not be empty")

        now = datetime.now(UTC).isoformat()
        with _storage_errors("add goal"):
            cursor = self.connection.execute(
                """
                INSERT INTO goals (name, is_reward, commands, quantity_name, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, int(is_reward), json.dumps(commands), quantity_name, now),
            )
            self.connection.commit()
            row = self.connection.execute(
                "SELECT * FROM goals WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
            return self._row_to_goal(row)

    # -- sessions -----------------------------------------------------------

    def _row_to_session(self, row: sqlite3.Row) -> Session:
        return Session(
            id=row["id"],
            goal_id=row["goal_id"],
            name=row["name"],
            kind=SessionKind.REWARD if row["is_reward"] else SessionKind.GOAL,
            start_at=_from_timestamp(row["start_at"]),
            end_at=_from_timestamp(row["end_at"]),
            quantity=row["quantity"],
        )

    def list_sessions_between(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Session]:
        query = "SELECT * FROM sessions WHERE 1=1"
        params: list[Any] = []
        if start is not None:
            query += " AND start_at >= ?"
            params.append(_to_timestamp(start))
        if end is not None:
            query += " AND start_at < ?"
            params.append(_to_timestamp(end))
        query += " ORDER BY start_at, id"

        with _storage_errors("list sessions"):
            rows = self.connection.execute(query, params).fetchall()
            return [self._row_to_session(row) for row in rows]

    def list_day_sessions(self, day: date) -> list[Session]:
        start, end = local_day_bounds(day)
        return self.list_sessions_between(start, end)

    def add_session(
        self,
        goal_id: int,
        name: str,
        start_at: datetime,
        duration_seconds: int,
        is_reward: bool,
        quantity: int | None = None,
    ) -> Session:
        if duration_seconds < 0:
            raise StorageError("Session duration must not be negative")
        start_ts = _to_timestamp(start_at)

        with _storage_errors("add session"):
            cursor = self.connection.execute(
                """
                INSERT INTO sessions (goal_id, name, is_reward, start_at, end_at, quantity)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (goal_id, name, int(is_reward), start_ts, start_ts + duration_seconds, quantity),
            )
            self.connection.commit()
            row = self.connection.execute(
                "SELECT * FROM sessions WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
            return self._row_to_session(row)

    # -- notes --------------------------------------------------------------

    def note_path(self, goal_id: int) -> Path:
        return self.archive / NOTES_DIR / f"goal_{goal_id}.md"

    def get_note(self, goal_id: int) -> str:
        path = self.note_path(goal_id)
        with _storage_errors("read note"):
            if not path.exists():
                return ""
            return path.read_text(encoding="utf-8")

    def edit_note(self, goal_id: int, content: str) -> None:
        path = self.note_path(goal_id)
        with _storage_errors("write note"):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
