"""Domain models for Success CLI."""

from success_cli.models.core import Goal, Session, SessionKind
from success_cli.models.keys import KeyCode, KeyEvent

__all__ = [
    "Goal",
    "Session",
    "SessionKind",
    "KeyCode",
    "KeyEvent",
]
