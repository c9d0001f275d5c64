"""Action helpers for running provisioning commands."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence

from raspi_provisioning.common.logging_utils import DEFAULT_LOGGER, LoggingManager
from raspi_provisioning.common.shell import DEFAULT_SHELL, ShellRunner
from raspi_provisioning.common.types import CommandFailedError, CommandResult


class ActionRunner:
    """Run state-changing commands with fail-fast semantics.

    ``apply`` raises :class:`CommandFailedError` as soon as a command exits
    outside ``ok_codes``; the caller never sees a partially failed step.
    ``probe`` is for read-only inspection and runs even in dry-run mode.
    """

    def __init__(
        self,
        *,
        shell: ShellRunner = DEFAULT_SHELL,
        logger: LoggingManager = DEFAULT_LOGGER,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.shell = shell
        self.logger = logger
        self.dry_run = dry_run
        self._sleep = sleep

    def apply(
        self,
        desc: str,
        cmd: list[str],
        *,
        ignore_failure: bool = False,
        ok_codes: Sequence[int] = (0,),
        timeout: float | None = 120,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        self.logger.log(f"[ACTION] {desc}")
        self.logger.log(f"         {self.shell.cmd_str(cmd)}")
        if self.dry_run:
            return CommandResult(cmd=cmd, returncode=0, stdout="", stderr="")

        res = self.shell.run_cmd(cmd, timeout=timeout, env=env, cwd=cwd)
        if res.returncode in ok_codes:
            return res

        if ignore_failure:
            self.logger.warning(
                f"Ignoring failure (rc={res.returncode}): {self.shell.cmd_str(cmd)} stderr={res.stderr.strip()}",
            )
            return res
        raise CommandFailedError(desc, res)

    def probe(self, cmd: list[str], timeout: float | None = 10) -> CommandResult:
        return self.shell.run_cmd(cmd, timeout=timeout)

    def spawn(
        self,
        desc: str,
        cmd: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> None:
        self.logger.log(f"[ACTION] {desc} (background)")
        self.logger.log(f"         {self.shell.cmd_str(cmd)}")
        if self.dry_run:
            return
        res = self.shell.spawn(cmd, env=env, cwd=cwd)
        if res.returncode != 0:
            raise CommandFailedError(desc, res)

    def wait(self, seconds: float, reason: str) -> None:
        if self.dry_run or seconds <= 0:
            return
        self.logger.debug("Waiting %ss for %s", seconds, reason)
        self._sleep(seconds)
