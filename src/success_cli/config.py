"""Configuration management for Success CLI."""

import json
from pathlib import Path

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.prompt import Prompt

from success_cli.utils.logger import get_logger

logger = get_logger(__name__)


class CliConfig(BaseModel):
    """Persisted CLI settings."""

    archive: str | None = Field(default=None)


class ConfigManager:
    """Reads and writes ``config.json`` in the user config directory."""

    def __init__(self):
        self.config_dir = Path(user_config_dir("success-cli"))
        self.config_file = self.config_dir / "config.json"
        self._config: CliConfig | None = None

    @property
    def config(self) -> CliConfig:
        """Get the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> CliConfig:
        """Load configuration from file; a corrupt file loads as the default."""
        if self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    data = json.load(f)
                return CliConfig(**data)
            except (OSError, ValueError, TypeError, ValidationError) as e:
                logger.warning("Ignoring unreadable config %s: %s", self.config_file, e)
                return CliConfig()
        return CliConfig()

    def save_config(self, config: CliConfig | None = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)

    def set_archive(self, archive: str | Path) -> None:
        """Store a new archive path."""
        self._config = self.config.model_copy(update={"archive": str(archive)})
        self.save_config()

    def reset(self) -> None:
        """Forget every stored setting."""
        self._config = CliConfig()
        if self.config_file.exists():
            self.config_file.unlink()


# Global config manager instance
_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def resolve_archive(
    archive: Path | None,
    console: Console,
    config_manager: ConfigManager | None = None,
) -> Path | None:
    """Decide which archive directory to open.

    Order: the ``--archive`` option, the stored config, then an interactive
    prompt. Returns None when the prompt is left empty.
    """
    if archive is not None:
        return archive.expanduser()

    config_manager = config_manager or get_config_manager()
    if config_manager.config.archive:
        return Path(config_manager.config.archive).expanduser()

    console.print("[yellow]Archive folder not set.[/yellow]")
    answer = Prompt.ask(
        "Enter a path to use (will be created if missing)",
        console=console,
        default="",
        show_default=False,
    )
    if not answer.strip():
        return None
    return Path(answer.strip()).expanduser()
