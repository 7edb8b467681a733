"""SQLite adapter module - local archive storage implementation."""

from success_cli.adapters.sqlite.goal_store import SqliteGoalStore, fuzzy_score

__all__ = [
    "SqliteGoalStore",
    "fuzzy_score",
]
