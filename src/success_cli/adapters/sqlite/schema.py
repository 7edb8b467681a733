"""Table definitions for the archive database."""

from __future__ import annotations

SCHEMA_VERSION = 1

# Goals (work goals and rewards share one table)
CREATE_GOALS_TABLE = """
CREATE TABLE IF NOT EXISTS goals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    is_reward BOOLEAN NOT NULL DEFAULT 0,
    commands TEXT NOT NULL DEFAULT '[]',  -- JSON array of shell commands
    quantity_name TEXT,
    created_at DATETIME NOT NULL
)
"""

# Completed sessions; start/end are unix timestamps (UTC seconds)
CREATE_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    goal_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    is_reward BOOLEAN NOT NULL DEFAULT 0,
    start_at INTEGER NOT NULL,
    end_at INTEGER NOT NULL,
    quantity INTEGER,
    FOREIGN KEY (goal_id) REFERENCES goals(id) ON DELETE CASCADE
)
"""

CREATE_INDEX_SESSIONS_START = (
    "CREATE INDEX IF NOT EXISTS idx_sessions_start_at ON sessions(start_at)"
)
CREATE_INDEX_SESSIONS_GOAL = (
    "CREATE INDEX IF NOT EXISTS idx_sessions_goal_id ON sessions(goal_id, start_at)"
)
CREATE_INDEX_GOALS_REWARD = (
    "CREATE INDEX IF NOT EXISTS idx_goals_is_reward ON goals(is_reward)"
)

ALL_TABLES = [
    CREATE_GOALS_TABLE,
    CREATE_SESSIONS_TABLE,
]

ALL_INDEXES = [
    CREATE_INDEX_SESSIONS_START,
    CREATE_INDEX_SESSIONS_GOAL,
    CREATE_INDEX_GOALS_REWARD,
]
