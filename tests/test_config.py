"""Tests for configuration storage and archive resolution."""

import json
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from success_cli import config as config_mod
from success_cli.config import CliConfig, ConfigManager, get_config_manager, resolve_archive


@pytest.fixture()
def config_dir(mocker, tmp_path):
    directory = tmp_path / "config"
    mocker.patch("success_cli.config.user_config_dir", return_value=str(directory))
    mocker.patch.object(config_mod, "_config_manager", None)
    return directory


@pytest.fixture()
def console():
    return Console(file=StringIO(), width=100)


class TestConfigManager:
    def test_default_when_missing(self, config_dir):
        assert ConfigManager().config == CliConfig()

    def test_set_archive_persists(self, config_dir, tmp_path):
        ConfigManager().set_archive(tmp_path / "archive")
        data = json.loads((config_dir / "config.json").read_text())
        assert data["archive"] == str(tmp_path / "archive")
        assert ConfigManager().config.archive == str(tmp_path / "archive")

    def test_corrupt_file_loads_default(self, config_dir):
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{not json")
        assert ConfigManager().config.archive is None

    def test_reset_removes_file(self, config_dir, tmp_path):
        manager = ConfigManager()
        manager.set_archive(tmp_path)
        manager.reset()
        assert not (config_dir / "config.json").exists()
        assert manager.config.archive is None

    def test_global_manager_is_cached(self, config_dir):
        assert get_config_manager() is get_config_manager()


class TestResolveArchive:
    def test_option_wins(self, config_dir, console, tmp_path):
        manager = ConfigManager()
        manager.set_archive(tmp_path / "stored")
        assert resolve_archive(tmp_path / "flag", console, manager) == tmp_path / "flag"

    def test_stored_archive(self, config_dir, console, tmp_path):
        manager = ConfigManager()
        manager.set_archive(tmp_path / "stored")
        assert resolve_archive(None, console, manager) == tmp_path / "stored"

    def test_prompts_when_unset(self, config_dir, console, mocker):
        ask = mocker.patch("success_cli.config.Prompt.ask", return_value="  ~/success ")
        result = resolve_archive(None, console, ConfigManager())
        assert result == Path("~/success").expanduser()
        ask.assert_called_once()

    def test_empty_answer_is_none(self, config_dir, console, mocker):
        mocker.patch("success_cli.config.Prompt.ask", return_value="")
        assert resolve_archive(None, console, ConfigManager()) is None
