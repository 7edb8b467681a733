"""Full-screen terminal UI built on rich ``Live``."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console, Group, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from success_cli.core.app import AppState
from success_cli.core.durations import format_day_label, format_remaining
from success_cli.core.text_input import TextInput
from success_cli.models.state import (
    CreateGoalForm,
    EditNotes,
    FocusedBlock,
    FormField,
    PickDuration,
    PickGoalForReward,
    PickGoalForSession,
    QuantityPrompt,
    RunningTimer,
)
from success_cli.ui.keyboard import KeyboardHandler
from success_cli.utils.logger import get_logger

logger = get_logger(__name__)

POLL_INTERVAL_SECONDS = 0.2
PROGRESS_BAR_WIDTH = 40

HELP_TEXT = {
    "view": "↑/↓ select  •  ←/→ day  •  Enter add  •  e notes  •  E editor  •  o archive  •  q quit",
    "timer": "↑/↓ select  •  ←/→ day  •  e notes  •  E editor  •  o archive  •  q quit",
    "search": "type to search  •  ↑/↓ select  •  Enter confirm  •  Esc cancel",
    "form": "Tab/↓ next field  •  Shift-Tab/↑ previous  •  Enter create  •  Esc cancel",
    "duration": "e.g. 25m, 1h30m, 45s  •  Enter start  •  Esc cancel",
    "quantity": "number  •  Enter save  •  Esc skip",
    "notes": "type to edit (saved automatically)  •  Ctrl-←/→ word  •  Esc done",
}


def input_text(field: TextInput, active: bool = True) -> Text:
    """Render a text input with a block cursor when active."""
    text = Text(field.value)
    if not active:
        return text
    if field.cursor < len(field.value):
        text.stylize("reverse", field.cursor, field.cursor + 1)
    else:
        text.append(" ", style="reverse")
    return text


class TuiDisplay:
    """Builds the screen layout for an ``AppState``."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def render(self, state: AppState) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="dialog", size=12, visible=state.is_dialog_open()),
            Layout(name="footer", size=1),
        )
        layout["body"].split_row(
            Layout(name="sessions", ratio=2),
            Layout(name="notes", ratio=3),
        )

        layout["header"].update(self._header(state))
        layout["sessions"].update(self._sessions(state))
        layout["notes"].update(self._notes(state))
        if state.is_dialog_open():
            layout["dialog"].update(self._dialog(state))
        layout["footer"].update(Text(self._help(state), style="dim", justify="center"))
        return layout

    def _header(self, state: AppState) -> Panel:
        text = Text(f"Archive: {state.archive_path} (open with 'o')")
        if state.status_message:
            text.append(f"  {state.status_message}", style="bold red")
        return Panel(text, title="Success CLI", border_style="dim" if state.is_dialog_open() else "")

    def _border(self, state: AppState, block: FocusedBlock) -> str:
        if not state.is_dialog_open() and state.focused_block is block:
            return "blue"
        return "dim" if state.is_dialog_open() else ""

    def _sessions(self, state: AppState) -> Panel:
        width = max(self.console.size.width * 2 // 5 - 4, 10)
        rows: list[RenderableType] = []
        for idx, item in enumerate(state.build_view(width)):
            style = ""
            if idx == state.selected and not state.is_dialog_open():
                style = "reverse"
            rows.append(Text(item.label, style=style, overflow="ellipsis", no_wrap=True))

        if state.timer is not None:
            rows.append(Text(""))
            rows.append(self._progress(state))

        title = f"Sessions ({format_day_label(state.current_day, state.today())})"
        return Panel(Group(*rows), title=title, border_style=self._border(state, FocusedBlock.SESSIONS))

    def _progress(self, state: AppState) -> Text:
        timer = state.timer
        total = timer.total_seconds
        elapsed = total - timer.remaining_seconds
        pct = min(100, int(elapsed / total * 100)) if total > 0 else 0
        filled = PROGRESS_BAR_WIDTH * pct // 100

        color = "red" if timer.remaining_seconds < 60 else "cyan"
        text = Text(f"{format_remaining(timer.remaining_seconds)} ", style=f"bold {color}")
        text.append("▓" * filled + "░" * (PROGRESS_BAR_WIDTH - filled), style="dim")
        text.append(f" {pct}%", style="dim")
        return text

    def _notes(self, state: AppState) -> Panel:
        notes = state.notes
        text = Text(notes.text)
        if isinstance(state.mode, EditNotes):
            if notes.cursor < len(notes.text) and notes.text[notes.cursor] != "\n":
                text.stylize("reverse", notes.cursor, notes.cursor + 1)
            else:
                text = Text(notes.text[: notes.cursor])
                text.append(" ", style="reverse")
                text.append(notes.text[notes.cursor :])
        return Panel(text, title="Notes", border_style=self._border(state, FocusedBlock.NOTES))

    def _dialog(self, state: AppState) -> Panel:
        match state.mode:
            case PickGoalForSession() | PickGoalForReward():
                title = "Choose reward" if isinstance(state.mode, PickGoalForReward) else "Choose goal"
                rows: list[RenderableType] = [Text("Search: ").append(input_text(state.search_input))]
                for idx, (label, _) in enumerate(state.search_results()):
                    style = "reverse" if idx == state.search_selected else ""
                    rows.append(Text(label, style=style, no_wrap=True, overflow="ellipsis"))
                body = Group(*rows)
            case CreateGoalForm() if state.form_state is not None:
                form = state.form_state
                title = "New reward" if form.is_reward else "New goal"
                fields = [
                    (FormField.NAME, "Name", form.goal_name),
                    (FormField.QUANTITY, "Quantity unit (optional)", form.quantity_name),
                    (FormField.COMMANDS, "Commands (; separated)", form.commands),
                ]
                rows = []
                for field, label, value in fields:
                    active = form.current_field is field
                    line = Text(f"{label}: ", style="bold blue" if active else "")
                    rows.append(line.append(input_text(value, active)))
                body = Group(*rows)
            case PickDuration(goal_name=goal_name):
                title = f"Duration for {goal_name}"
                body = Text("Duration: ").append(input_text(state.duration_input))
            case QuantityPrompt(goal_name=goal_name, unit_name=unit_name):
                title = f"{unit_name or 'Quantity'} for {goal_name}"
                body = Text("Amount: ").append(input_text(state.quantity_input))
            case _:
                title, body = "", Text("")
        return Panel(body, title=title, border_style="blue")

    def _help(self, state: AppState) -> str:
        match state.mode:
            case RunningTimer():
                return HELP_TEXT["timer"]
            case PickGoalForSession() | PickGoalForReward():
                return HELP_TEXT["search"]
            case CreateGoalForm():
                return HELP_TEXT["form"]
            case PickDuration():
                return HELP_TEXT["duration"]
            case QuantityPrompt():
                return HELP_TEXT["quantity"]
            case EditNotes():
                return HELP_TEXT["notes"]
            case _:
                return HELP_TEXT["view"]


def run_tui(state: AppState, console: Console | None = None) -> None:
    """Run the poll loop until the user quits.

    Each cycle ticks the state, redraws, then waits up to
    ``POLL_INTERVAL_SECONDS`` for a key.
    """
    display = TuiDisplay(console)
    keyboard = KeyboardHandler()
    live = Live(
        display.render(state),
        console=display.console,
        screen=True,
        auto_refresh=False,
    )

    @contextmanager
    def suspend() -> Iterator[None]:
        live.stop()
        try:
            with keyboard.suspended():
                yield
        finally:
            live.start(refresh=True)

    state.suspend = suspend
    try:
        with live:
            while True:
                state.tick()
                live.update(display.render(state), refresh=True)
                key = keyboard.read_key(POLL_INTERVAL_SECONDS)
                if key is not None and state.handle_input(key):
                    break
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        keyboard.stop()
        state.shutdown()
