"""Database connection management for the archive's SQLite file."""

from __future__ import annotations

import atexit
import sqlite3
from pathlib import Path

from success_cli.adapters.sqlite.migrations.m001_initial_schema import initial_migration
from success_cli.adapters.sqlite.migrations.runner import MigrationRunner

DB_FILENAME = "success.db"

MIGRATIONS = [
    initial_migration,
]


class DatabaseConnection:
    """Process-wide connection to the current archive database.

    Provides:
    - Connection reuse while the archive path stays the same
    - WAL mode and foreign key enforcement
    - Schema migrations on open
    - Commit and close at interpreter exit
    """

    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None
    _atexit_registered = False

    @classmethod
    def get_connection(cls, db_path: str | Path) -> sqlite3.Connection:
        """Get or create the connection for ``db_path``.

        The parent directory is created when missing.
        """
        db_path = Path(db_path)
        if cls._connection is not None and cls._db_path == db_path:
            return cls._connection

        cls.close_connection()

        db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = open_database(db_path)

        cls._connection = connection
        cls._db_path = db_path
        if not cls._atexit_registered:
            atexit.register(cls.close_connection)
            cls._atexit_registered = True
        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Close the current connection, if any."""
        if cls._connection is None:
            return
        try:
            cls._connection.commit()
            cls._connection.close()
        except sqlite3.Error:
            pass  # already closed or unusable
        finally:
            cls._connection = None
            cls._db_path = None


def open_database(db_path: str | Path) -> sqlite3.Connection:
    """Open a configured, fully migrated connection (``":memory:"`` works too)."""
    connection = sqlite3.connect(str(db_path), timeout=30.0)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    if str(db_path) != ":memory:":
        connection.execute("PRAGMA journal_mode = WAL")
    MigrationRunner(connection).run_migrations(MIGRATIONS)
    return connection


def get_connection(archive: str | Path) -> sqlite3.Connection:
    """Connection to the database inside an archive directory."""
    return DatabaseConnection.get_connection(Path(archive) / DB_FILENAME)
