"""Process helpers shared by the provisioning tools."""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping

from raspi_provisioning.common.logging_utils import DEFAULT_LOGGER, LoggingManager
from raspi_provisioning.common.types import CommandResult

# Exit status reported when a process could not be started at all.
SPAWN_FAILED_RC = 255


class ShellRunner:
    """Run external programs and report every outcome as a CommandResult.

    Nothing here raises: a missing binary, a timeout or a permission error
    becomes a result with ``returncode=255`` and the error text in stderr.
    Callers decide whether that is fatal.
    """

    def __init__(self, *, logger: LoggingManager = DEFAULT_LOGGER) -> None:
        self.logger = logger

    def cmd_str(self, cmd: list[str]) -> str:
        """Return a shell-escaped string for display."""
        return shlex.join(cmd)

    @staticmethod
    def _merged_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
        return {**os.environ, **env} if env else None

    def _not_started(self, cmd: list[str], exc: Exception) -> CommandResult:
        self.logger.debug("Could not start %s: %s", cmd[0] if cmd else "<empty>", exc)
        return CommandResult(cmd=cmd, returncode=SPAWN_FAILED_RC, stdout="", stderr=str(exc))

    def run_cmd(
        self,
        cmd: list[str],
        timeout: float | None = 5,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run to completion with captured text output."""
        self.logger.debug("Running: %s", self.cmd_str(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=self._merged_env(env),
                cwd=cwd,
            )
        except (OSError, subprocess.SubprocessError, ValueError) as exc:
            return self._not_started(cmd, exc)

        self.logger.debug("rc=%s stdout=%r stderr=%r", proc.returncode, proc.stdout, proc.stderr)
        return CommandResult(cmd=cmd, returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def spawn(
        self,
        cmd: list[str],
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        """Start a detached background process; stdout carries its pid."""
        self.logger.debug("Spawning: %s", self.cmd_str(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=self._merged_env(env),
                cwd=cwd,
                start_new_session=True,
            )
        except (OSError, subprocess.SubprocessError, ValueError) as exc:
            return self._not_started(cmd, exc)

        self.logger.debug("Spawned pid=%s", proc.pid)
        return CommandResult(cmd=cmd, returncode=0, stdout=str(proc.pid), stderr="")


DEFAULT_SHELL = ShellRunner()
