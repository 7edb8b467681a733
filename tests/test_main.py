"""Tests for the top-level CLI entry point."""

import pytest
from typer.testing import CliRunner

from conftest import FakeStore
from success_cli import __version__
from success_cli import config as config_mod
from success_cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def config_dir(mocker, tmp_path):
    directory = tmp_path / "config"
    mocker.patch("success_cli.config.user_config_dir", return_value=str(directory))
    mocker.patch.object(config_mod, "_config_manager", None)
    return directory


@pytest.fixture()
def run_tui(mocker):
    return mocker.patch("success_cli.main.run_tui")


@pytest.fixture()
def store_cls(mocker):
    return mocker.patch("success_cli.main.SqliteGoalStore", side_effect=FakeStore)


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_archive_option_opens_tui(tmp_path, run_tui, store_cls, config_dir):
    archive = tmp_path / "archive"
    result = runner.invoke(app, ["--archive", str(archive)])

    assert result.exit_code == 0
    assert archive.is_dir()
    store_cls.assert_called_once_with(archive)
    state = run_tui.call_args.args[0]
    assert state.archive_path == archive
    # An explicit archive is not remembered.
    assert not (config_dir / "config.json").exists()


def test_prompted_archive_is_remembered(tmp_path, run_tui, store_cls, mocker):
    archive = tmp_path / "prompted"
    mocker.patch("success_cli.main.resolve_archive", return_value=archive)

    result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert config_mod.get_config_manager().config.archive == str(archive)
    run_tui.assert_called_once()


def test_missing_archive_exits_with_error(run_tui, mocker):
    mocker.patch("success_cli.main.resolve_archive", return_value=None)
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert "Archive folder not provided" in result.stdout
    run_tui.assert_not_called()


def test_unexpected_error_is_reported(tmp_path, run_tui, store_cls):
    run_tui.side_effect = RuntimeError("terminal exploded")
    result = runner.invoke(app, ["-a", str(tmp_path)])
    assert result.exit_code == 1
    assert "terminal exploded" in result.stdout
