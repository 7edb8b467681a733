"""Configuration management commands."""

from pathlib import Path

import typer

from success_cli.commands.decorators import AppError, command_wrapper
from success_cli.config import get_config_manager
from success_cli.ui.formatters import console, format_error, format_success

app = typer.Typer(help="Configuration management commands")


@app.command("show")
@command_wrapper
def show_config() -> None:
    """Show the stored configuration."""
    config_manager = get_config_manager()
    console.print(f"[dim]{config_manager.config_file}[/dim]")
    console.print_json(data=config_manager.config.model_dump())


@app.command("set-archive")
@command_wrapper
def set_archive(
    path: Path = typer.Argument(..., help="Archive directory (created if missing)"),
) -> None:
    """Store the archive directory used when --archive is not given."""
    archive = path.expanduser()
    try:
        archive.mkdir(parents=True, exist_ok=True)
        get_config_manager().set_archive(archive)
    except OSError as e:
        raise AppError(f"Failed to set archive: {e}") from e
    format_success(f"Archive set to '{archive}'")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete the stored configuration."""
    if not yes:
        confirm = typer.confirm("Are you sure you want to reset the configuration?")
        if not confirm:
            format_error("Cancelled")
            raise typer.Exit(0)

    get_config_manager().reset()
    format_success("Configuration reset to defaults")
