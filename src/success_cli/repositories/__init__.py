"""Repository interfaces for Success CLI."""

from success_cli.repositories.repository import GoalStore, StorageError

__all__ = ["GoalStore", "StorageError"]
