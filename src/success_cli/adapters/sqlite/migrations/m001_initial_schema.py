"""Migration 001: goals and sessions tables."""

import sqlite3

from success_cli.adapters.sqlite.schema import ALL_INDEXES, ALL_TABLES
from .runner import Migration


class InitialSchemaMigration(Migration):
    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Goals and sessions"

    def up(self, connection: sqlite3.Connection) -> None:
        for table_sql in ALL_TABLES:
            connection.execute(table_sql)
        for index_sql in ALL_INDEXES:
            connection.execute(index_sql)


initial_migration = InitialSchemaMigration()
