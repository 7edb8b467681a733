"""Application-wide logging to a rotating file under platformdirs user_log_dir.

The TUI owns the terminal, so records never go to stdout/stderr. Modules ask
for a child logger (``get_logger(__name__)``) so the origin of every record is
visible in the log file.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "success_cli"
_LOG_FILE = "success.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3
_HANDLER_NAME = "success_cli.file"

_root: logging.Logger | None = None


def _init_root() -> logging.Logger:
    global _root
    if _root is not None:
        return _root

    log_dir = Path(user_log_dir(_APP_NAME))
    handler: logging.Handler
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_dir / _LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        # Unwritable log dir: keep running without a log file.
        handler = logging.NullHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    handler.set_name(_HANDLER_NAME)

    root = logging.getLogger(_APP_NAME)
    root.setLevel(logging.INFO)
    # Other handlers (e.g. a test harness's) may already be attached.
    if find_app_handler(root) is None:
        root.addHandler(handler)
    else:
        handler.close()
    root.propagate = False

    _root = root
    return _root


def find_app_handler(root: logging.Logger) -> logging.Handler | None:
    """The handler this module installed on ``root``, if any."""
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, or a child of it.

    Args:
        name: Dotted module name. Names inside the ``success_cli`` package
            are used as-is; anything else is nested under it.
    """
    root = _init_root()
    if not name or name == _APP_NAME:
        return root
    if name.startswith(_APP_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def set_level(level: int) -> None:
    """Change the verbosity of the whole application log."""
    _init_root().setLevel(level)


def log_file_path() -> Path:
    return Path(user_log_dir(_APP_NAME)) / _LOG_FILE
