"""External editor and file manager integration."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path

from success_cli.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EDITOR = "nvim"


class EditorError(Exception):
    """The external editor could not be run or exited unsuccessfully."""


def file_manager_command() -> str:
    if sys.platform == "darwin":
        return "open"
    if sys.platform == "win32":
        return "explorer"
    return "xdg-open"


def parse_editor_command(text: str) -> list[str]:
    """Split an ``$EDITOR`` value into argv.

    Single quotes are literal, double quotes group but still honour
    backslash escapes, and a backslash outside single quotes escapes the
    next character.

    >>> parse_editor_command('code --wait "my file"')
    ['code', '--wait', 'my file']
    """
    args: list[str] = []
    current = ""
    in_single = False
    in_double = False
    chars = iter(text)

    for ch in chars:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "\\" and not in_single:
            current += next(chars, "")
        elif ch.isspace() and not in_single and not in_double:
            if current:
                args.append(current)
                current = ""
        else:
            current += ch

    if current:
        args.append(current)
    return args


def editor_argv(path: Path, editor: str | None = None) -> list[str]:
    """Build the command line that opens ``path`` in the user's editor."""
    if editor is None:
        editor = os.environ.get("EDITOR", DEFAULT_EDITOR)
    parts = parse_editor_command(editor.strip()) or [DEFAULT_EDITOR]
    return [*parts, str(path)]


def open_note_in_editor(
    path: Path,
    suspend: Callable[[], AbstractContextManager] | None = None,
) -> None:
    """Open a note file in ``$EDITOR`` and block until the editor exits.

    Args:
        path: Note file to edit; created empty if missing
        suspend: Context manager factory that releases the terminal while
            the editor runs

    Raises:
        EditorError: The editor is missing or exited with a non-zero status
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
    except OSError as e:
        raise EditorError(f"Cannot create note file {path}: {e}") from e
    argv = editor_argv(path)

    with (suspend or nullcontext)():
        try:
            result = subprocess.run(argv, check=False)
        except OSError as e:
            raise EditorError(f"Failed to run {argv[0]}: {e}") from e

    if result.returncode != 0:
        raise EditorError(f"Editor exited with status {result.returncode}")
    logger.info("Edited note %s with %s", path, argv[0])


def open_archive_in_file_manager(archive: Path) -> None:
    """Reveal the archive folder; failures are logged and ignored."""
    command = file_manager_command()
    try:
        archive.mkdir(parents=True, exist_ok=True)
        subprocess.Popen(
            [command, str(archive)],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=sys.platform != "win32",
        )
    except OSError as e:
        logger.warning("Failed to start %s: %s", command, e)
