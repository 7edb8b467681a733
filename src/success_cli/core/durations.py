"""Parsing and formatting helpers for durations, quantities and commands."""

import re
from datetime import date

DEFAULT_DURATION_SECONDS = 25 * 60
DEFAULT_DURATION_SUGGESTION = "25m"

_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}
_COMMAND_SEPARATORS = re.compile(r"[;\n]")


def parse_duration(text: str) -> int | None:
    """Parse free text such as ``"1h30m"``, ``"90"`` or ``"45s"`` into seconds.

    Digit runs are terminated by a unit letter (h, m, s). A trailing run
    without a unit counts as minutes. Whitespace is ignored.

    Returns:
        Total seconds, or None for empty input, an unknown unit, any other
        character, or a total of zero.
    """
    text = text.strip()
    if not text:
        return None

    total = 0
    digits = ""
    for ch in text:
        if ch.isdigit() and ch.isascii():
            digits += ch
        elif ch.isalpha():
            if not digits:
                continue
            unit = _UNIT_SECONDS.get(ch.lower())
            if unit is None:
                return None
            total += int(digits) * unit
            digits = ""
        elif ch.isspace():
            continue
        else:
            return None

    if digits:
        total += int(digits) * 60

    return total or None


def format_duration_suggestion(duration_minutes: int) -> str:
    """Render a previous session length as duration text.

    >>> format_duration_suggestion(90)
    '1h 30m'
    """
    minutes = max(duration_minutes, 0)
    if minutes == 0:
        return "1s"
    hours, mins = divmod(minutes, 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def parse_optional_quantity(text: str) -> int | None:
    """Parse an optional non-negative integer; anything else is None."""
    text = text.strip()
    if not text.isdigit() or not text.isascii():
        return None
    return int(text)


def parse_commands_input(text: str) -> list[str]:
    """Split ``;``- or newline-delimited commands, dropping empty entries."""
    return [part.strip() for part in _COMMAND_SEPARATORS.split(text) if part.strip()]


def format_day_label(day: date, today: date) -> str:
    """``2024-05-01, today`` or ``2024-04-29, -2d``."""
    base = day.isoformat()
    diff = (today - day).days
    if diff == 0:
        return f"{base}, today"
    return f"{base}, -{diff}d"


def format_remaining(seconds: int) -> str:
    """``MM:SS`` (or ``H:MM:SS`` past an hour) countdown text."""
    seconds = max(seconds, 0)
    hours, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"
