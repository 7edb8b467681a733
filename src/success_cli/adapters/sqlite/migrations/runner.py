"""Forward-only, version-numbered schema migrations."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Migration(ABC):
    """One schema change, applied at most once per database."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Sequential version number."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable summary stored in ``schema_version``."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Apply the change."""


class MigrationRunner:
    """Applies pending migrations and records them in ``schema_version``."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at DATETIME NOT NULL
            )
        """)
        self.connection.commit()

    def get_current_version(self) -> int:
        """Highest applied version, 0 for a fresh database."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    def run_migration(self, migration: Migration) -> None:
        """Apply one migration inside a transaction.

        Raises:
            ValueError: The migration is not newer than the database
            RuntimeError: The migration failed and was rolled back
        """
        current = self.get_current_version()
        if migration.version <= current:
            raise ValueError(
                f"Migration version {migration.version} is not greater than "
                f"current version {current}"
            )

        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now(UTC).isoformat()),
            )
            self.connection.commit()
        except Exception as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Apply every migration newer than the database, in order.

        Returns:
            Number of migrations applied
        """
        current = self.get_current_version()
        pending = sorted(
            (m for m in migrations if m.version > current), key=lambda m: m.version
        )
        for migration in pending:
            self.run_migration(migration)
        return len(pending)
