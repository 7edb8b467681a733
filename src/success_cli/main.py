"""Main entry point for Success CLI."""

import logging
from pathlib import Path

import typer

from success_cli import __version__
from success_cli.adapters.sqlite import SqliteGoalStore
from success_cli.commands import config
from success_cli.commands.decorators import AppError, command_wrapper
from success_cli.config import get_config_manager, resolve_archive
from success_cli.core.app import AppState
from success_cli.ui.formatters import console, format_warning
from success_cli.ui.tui import run_tui
from success_cli.utils.logger import get_logger, log_file_path, set_level

logger = get_logger(__name__)

app = typer.Typer(
    name="success",
    help="Alternate focused goal sessions and rewards with a countdown timer",
)

app.add_typer(config.app, name="config", help="Configuration management")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    archive: Path | None = typer.Option(
        None, "--archive", "-a", help="Custom archive path (useful for testing)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Open the session timer for an archive (the default command)."""
    if verbose:
        set_level(logging.DEBUG)
    if ctx.invoked_subcommand is not None:
        return
    run(archive)


@command_wrapper
def run(archive: Path | None) -> None:
    """Resolve the archive, then run the TUI until the user quits."""
    path = resolve_archive(archive, console)
    if path is None:
        raise AppError("Archive folder not provided")

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AppError(f"Cannot create archive folder {path}: {e}") from e

    # Remember the archive only when it was not given explicitly.
    if archive is None:
        try:
            get_config_manager().set_archive(path)
        except OSError as e:
            format_warning(f"Could not save config: {e}")

    logger.info("Opening archive %s", path)
    state = AppState(SqliteGoalStore(path), path)
    run_tui(state, console)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Success CLI[/bold] version [cyan]{__version__}[/cyan]")
    console.print(f"[dim]Log file: {log_file_path()}[/dim]")


if __name__ == "__main__":
    app()
