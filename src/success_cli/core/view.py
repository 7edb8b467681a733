"""Render-agnostic projection of the application state.

Frontends draw the list returned by ``build_view_items`` and use
``selected_goal_id`` to decide which goal the notes panel belongs to.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from success_cli.models import Session, SessionKind
from success_cli.models.state import QuantityPrompt, TimerSession, ViewItem, ViewItemKind

if TYPE_CHECKING:
    from success_cli.core.app import AppState


def local_hhmm(value: datetime) -> str:
    return value.astimezone().strftime("%H:%M")


def goal_quantity_name(state: AppState, goal_id: int) -> str | None:
    """Quantity unit of a loaded goal, if it tracks one."""
    for goal in state.goals:
        if goal.id == goal_id:
            return goal.quantity_name
    return None


def session_label(state: AppState, session: Session) -> str:
    """``[S] Read (12 pages in 25m) [09:00-09:25]``"""
    prefix = "[R]" if session.kind is SessionKind.REWARD else "[S]"
    minutes = session.duration_seconds // 60
    unit = goal_quantity_name(state, session.goal_id)
    unit_text = f" {unit}" if unit else ""
    qty_text = f"{session.quantity}{unit_text} in " if session.quantity is not None else ""
    times = f"{local_hhmm(session.start_at)}-{local_hhmm(session.end_at)}"
    return f"{prefix} {session.name} ({qty_text}{minutes}m) [{times}]"


def timer_label(timer: TimerSession) -> str:
    return (
        f"[*] {timer.label} ({timer.remaining_seconds}s left) "
        f"[started {local_hhmm(timer.started_at)}]"
    )


def build_view_items(state: AppState, width: int = 20) -> list[ViewItem]:
    """Rows of the sessions list for the viewed day.

    Existing sessions come first, then the running timer (today only), then
    the add pseudo-row (today only, and only while no timer runs).
    ``width`` is the available row width; labels are not wrapped here.
    """
    items = [
        ViewItem(session_label(state, session), ViewItemKind.EXISTING, idx)
        for idx, session in enumerate(state.sessions)
    ]

    is_today = state.current_day == state.today()
    if state.timer is not None:
        if is_today:
            items.append(ViewItem(timer_label(state.timer), ViewItemKind.RUNNING_TIMER))
        return items

    if not is_today:
        return items

    match state.mode:
        case QuantityPrompt(goal_name=goal_name, unit_name=unit_name):
            items.append(
                ViewItem(
                    f"[+] Insert {unit_name or 'quantity'} for {goal_name}",
                    ViewItemKind.ADD_SESSION,
                )
            )
        case _ if state.sessions and state.sessions[-1].kind is SessionKind.GOAL:
            items.append(ViewItem("[+] Receive reward", ViewItemKind.ADD_REWARD))
        case _:
            items.append(ViewItem("[+] Work on new goal", ViewItemKind.ADD_SESSION))
    return items


def last_index(state: AppState) -> int:
    """Index of the most recent row (0 for an empty list)."""
    return max(len(build_view_items(state)) - 1, 0)


def selected_goal_id(state: AppState) -> int | None:
    """Goal the current selection refers to.

    The running-timer row resolves to the timer's goal, an existing row to
    its session's goal. Anything else falls back to the active timer so the
    notes stay addressable while a dialog is open.
    """
    items = build_view_items(state)
    timer_goal = state.timer.goal_id if state.timer is not None else None
    if not 0 <= state.selected < len(items):
        return timer_goal

    item = items[state.selected]
    if item.kind is ViewItemKind.RUNNING_TIMER:
        return timer_goal
    if item.kind is ViewItemKind.EXISTING and item.session_index is not None:
        return state.sessions[item.session_index].goal_id
    return timer_goal
