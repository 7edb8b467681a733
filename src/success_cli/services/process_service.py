"""Lifecycle of helper commands launched alongside a session.

Each configured command runs detached in its own session/process group, so a
single signal reaches everything it starts. Teardown escalates from a graceful
terminate to a forceful kill of the group, then kills and reaps the direct
child, and finally sweeps by command line for anything that escaped the group.
"""

from __future__ import annotations

import os
import re
import signal
import subprocess
import sys
import time
from dataclasses import dataclass

from success_cli.utils.logger import get_logger

logger = get_logger(__name__)

GRACE_PERIOD_SECONDS = 0.15
IS_POSIX = os.name == "posix"

_ERE_SPECIAL = re.compile(r"([.\[\]()*+?{}|^$\\])")


@dataclass
class SpawnedProcess:
    """A helper command and, if it started, its OS handle.

    ``pgid`` is the process group that was signalled as a whole; it falls
    back to the child's pid when the group cannot be read.
    """

    command: str
    process: subprocess.Popen | None = None
    pgid: int | None = None

    @property
    def is_live(self) -> bool:
        return self.process is not None

    def terminate_group(self, grace_period: float = GRACE_PERIOD_SECONDS) -> bool:
        """Stop the command and everything in its group.

        Every step is best effort. Returns True once the direct child has
        been reaped.
        """
        if self.process is None:
            return False

        if IS_POSIX:
            self._signal_group(signal.SIGTERM)
            time.sleep(grace_period)
            self._signal_group(signal.SIGKILL)

        try:
            self.process.kill()
        except ProcessLookupError:
            pass
        except OSError as e:
            logger.warning("Failed to kill '%s': %s", self.command, e)

        reaped = True
        try:
            self.process.wait(timeout=1)
        except subprocess.TimeoutExpired:
            logger.warning("'%s' did not exit after kill", self.command)
            reaped = False
        except OSError as e:
            logger.warning("Failed to wait for '%s': %s", self.command, e)
            reaped = False

        if IS_POSIX:
            sweep_by_command(self.command)

        self.process = None
        return reaped

    def _signal_group(self, sig: signal.Signals) -> None:
        pgid = self.pgid if self.pgid else self.process.pid
        try:
            os.killpg(pgid, sig)
        except ProcessLookupError:
            pass
        except OSError as e:
            logger.warning("Failed to send %s to group %s ('%s'): %s", sig.name, pgid, self.command, e)


def _build_argv(command: str) -> list[str]:
    if sys.platform == "win32":
        return ["cmd", "/C", command]
    return ["sh", "-c", f"exec {command}"]


def spawn_command(command: str) -> SpawnedProcess:
    """Start one helper command detached from the terminal.

    A command that fails to start is logged and returned without a handle.
    """
    kwargs: dict = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
    }
    if sys.platform == "win32":
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True

    try:
        process = subprocess.Popen(_build_argv(command), **kwargs)
    except OSError as e:
        logger.warning("Failed to start '%s': %s", command, e)
        return SpawnedProcess(command=command)

    pgid = None
    if IS_POSIX:
        try:
            pgid = os.getpgid(process.pid)
        except OSError:
            pgid = process.pid

    logger.info("Started '%s' (pid %s, pgid %s)", command, process.pid, pgid)
    return SpawnedProcess(command=command, process=process, pgid=pgid)


def spawn_commands(commands: list[str]) -> list[SpawnedProcess]:
    return [spawn_command(command) for command in commands]


def kill_spawned(processes: list[SpawnedProcess]) -> None:
    """Tear down every helper that still has a handle."""
    for spawned in processes:
        if spawned.is_live:
            spawned.terminate_group()
            logger.info("Stopped '%s'", spawned.command)


def command_pattern(command: str) -> str:
    """Extended regex matching command lines that start with ``command``.

    >>> command_pattern("mpv a+b.mp3")
    '^mpv a\\\\+b\\\\.mp3'
    """
    return "^" + _ERE_SPECIAL.sub(r"\\\1", command)


def sweep_by_command(command: str) -> None:
    """Kill processes whose command line starts with ``command``, ignoring every failure.

    Catches apps that reparent or daemonize outside the original group.
    """
    try:
        subprocess.run(
            ["pkill", "-f", command_pattern(command)],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        pass
