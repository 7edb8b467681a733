"""Tests for helper process spawning and teardown."""

from __future__ import annotations

import re
import signal
import subprocess
from unittest.mock import MagicMock, call

import pytest

from success_cli.services import process_service
from success_cli.services.process_service import (
    SpawnedProcess,
    command_pattern,
    kill_spawned,
    spawn_command,
    spawn_commands,
)


@pytest.fixture()
def posix(mocker):
    mocker.patch.object(process_service, "IS_POSIX", True)
    mocker.patch.object(process_service.sys, "platform", "linux")


@pytest.fixture()
def fake_popen(mocker):
    process = MagicMock(pid=4242)
    popen = mocker.patch("success_cli.services.process_service.subprocess.Popen", return_value=process)
    return popen


class TestSpawn:
    def test_runs_detached_in_new_session(self, posix, fake_popen, mocker):
        mocker.patch("success_cli.services.process_service.os.getpgid", return_value=4242)
        spawned = spawn_command("firefox --new-window")

        argv = fake_popen.call_args.args[0]
        kwargs = fake_popen.call_args.kwargs
        assert argv == ["sh", "-c", "exec firefox --new-window"]
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] is subprocess.DEVNULL
        assert spawned.is_live
        assert spawned.pgid == 4242

    def test_pgid_falls_back_to_pid(self, posix, fake_popen, mocker):
        mocker.patch("success_cli.services.process_service.os.getpgid", side_effect=OSError)
        assert spawn_command("sleep 10").pgid == 4242

    def test_start_failure_is_recorded_without_handle(self, posix, mocker):
        mocker.patch(
            "success_cli.services.process_service.subprocess.Popen",
            side_effect=FileNotFoundError("sh"),
        )
        spawned = spawn_command("does-not-exist")
        assert spawned.command == "does-not-exist"
        assert not spawned.is_live

    def test_spawn_commands_keeps_order(self, posix, fake_popen, mocker):
        mocker.patch("success_cli.services.process_service.os.getpgid", return_value=1)
        spawned = spawn_commands(["a", "b"])
        assert [s.command for s in spawned] == ["a", "b"]


class TestTeardown:
    @pytest.fixture()
    def killpg(self, mocker):
        return mocker.patch("success_cli.services.process_service.os.killpg")

    @pytest.fixture()
    def sleep(self, mocker):
        return mocker.patch("success_cli.services.process_service.time.sleep")

    @pytest.fixture()
    def pkill(self, mocker):
        return mocker.patch("success_cli.services.process_service.subprocess.run")

    def test_escalates_term_then_kill(self, posix, killpg, sleep, pkill):
        process = MagicMock(pid=10)
        spawned = SpawnedProcess("mpv song.mp3", process=process, pgid=99)

        assert spawned.terminate_group() is True

        assert killpg.call_args_list == [call(99, signal.SIGTERM), call(99, signal.SIGKILL)]
        sleep.assert_called_once_with(process_service.GRACE_PERIOD_SECONDS)
        process.kill.assert_called_once()
        process.wait.assert_called_once_with(timeout=1)
        assert pkill.call_args.args[0] == ["pkill", "-f", r"^mpv song\.mp3"]
        assert not spawned.is_live

    def test_missing_group_is_ignored(self, posix, killpg, sleep, pkill):
        killpg.side_effect = ProcessLookupError
        process = MagicMock(pid=10)
        process.kill.side_effect = ProcessLookupError
        spawned = SpawnedProcess("gone", process=process, pgid=99)
        assert spawned.terminate_group() is True

    def test_unreaped_child_reports_false(self, posix, killpg, sleep, pkill):
        process = MagicMock(pid=10)
        process.wait.side_effect = subprocess.TimeoutExpired("stuck", 1)
        assert SpawnedProcess("stuck", process=process, pgid=10).terminate_group() is False

    def test_sweep_failure_is_ignored(self, posix, killpg, sleep, pkill):
        pkill.side_effect = FileNotFoundError("pkill")
        process = MagicMock(pid=10)
        assert SpawnedProcess("app", process=process, pgid=10).terminate_group() is True

    def test_non_posix_only_kills_child(self, mocker, killpg, sleep, pkill):
        mocker.patch.object(process_service, "IS_POSIX", False)
        process = MagicMock(pid=10)
        SpawnedProcess("notepad", process=process).terminate_group()
        killpg.assert_not_called()
        pkill.assert_not_called()
        process.kill.assert_called_once()

    def test_kill_spawned_skips_dead_entries(self, posix, killpg, sleep, pkill):
        live = SpawnedProcess("live", process=MagicMock(pid=1), pgid=1)
        dead = SpawnedProcess("dead")
        kill_spawned([live, dead])
        assert killpg.call_count == 2
        assert not live.is_live


@pytest.mark.parametrize(
    ("command", "pattern"),
    [
        ("firefox", "^firefox"),
        ("mpv a+b (live).mp3", r"^mpv a\+b \(live\)\.mp3"),
        ("grep [x]? $HOME", r"^grep \[x\]\? \$HOME"),
        (r"echo a\b|c", r"^echo a\\b\|c"),
    ],
)
def test_command_pattern_escapes_and_anchors(command, pattern):
    assert command_pattern(command) == pattern


def test_sweep_pattern_only_matches_command_prefix():
    pattern = re.compile(command_pattern("/nonexistent/binary --x"))
    assert pattern.search("/nonexistent/binary --x --verbose")
    assert not pattern.search("bash -c 'sweep /nonexistent/binary --x'")
    assert re.compile(command_pattern("a+b")).search("a+b") is not None
