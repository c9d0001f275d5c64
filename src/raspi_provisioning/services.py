"""systemd service control and post-start health checks."""

from __future__ import annotations

import dataclasses
import shutil

from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.types import CommandResult


@dataclasses.dataclass
class ServiceHealth:
    """Result of checking a single unit with ``systemctl is-active``."""

    unit: str
    active: bool
    state: str


@dataclasses.dataclass
class HealthReport:
    services: list[ServiceHealth]

    @property
    def healthy(self) -> bool:
        return all(item.active for item in self.services)

    @property
    def inactive(self) -> list[str]:
        return [item.unit for item in self.services if not item.active]


def systemd_analyze_available() -> bool:
    """Return True if systemd-analyze is present in PATH."""

    return shutil.which("systemd-analyze") is not None


class ServiceManager:
    """Thin wrapper over systemctl that fails fast through ActionRunner."""

    def __init__(self, actions: ActionRunner) -> None:
        self.actions = actions
        self.logger = actions.logger

    def _systemctl(self, verb: str, unit: str) -> CommandResult:
        return self.actions.apply(f"{verb.capitalize()} {unit}", ["systemctl", verb, unit])

    def start(self, unit: str) -> None:
        self._systemctl("start", unit)

    def stop(self, unit: str) -> None:
        self._systemctl("stop", unit)

    def restart(self, unit: str) -> None:
        self._systemctl("restart", unit)

    def enable(self, unit: str) -> None:
        self._systemctl("enable", unit)

    def unmask(self, unit: str) -> None:
        self._systemctl("unmask", unit)

    def daemon_reload(self) -> None:
        self.actions.apply("Reload systemd units", ["systemctl", "daemon-reload"])

    def is_active(self, unit: str) -> ServiceHealth:
        res = self.actions.probe(["systemctl", "is-active", unit])
        state = res.stdout.strip() or f"rc={res.returncode}"
        return ServiceHealth(unit=unit, active=res.returncode == 0, state=state)

    def health_check(self, units: list[str], delay: float = 0) -> HealthReport:
        """Wait a fixed delay, then report which units are running.

        Inactive units are logged as warnings; the run is not aborted because
        the daemons were started successfully and may still be settling.
        """

        if self.actions.dry_run:
            self.logger.info("Dry-run: skipping service health check.")
            return HealthReport(services=[])

        self.actions.wait(delay, "services to settle")
        results = [self.is_active(unit) for unit in units]
        for item in results:
            if item.active:
                self.logger.success(f"{item.unit} is active.")
            else:
                self.logger.warning(
                    f"{item.unit} is not active ({item.state}). Check: journalctl -u {item.unit}",
                )
        return HealthReport(services=results)

    def verify_unit(self, path: str) -> bool | None:
        """Run systemd-analyze verify on a unit file; None when unavailable."""

        if not systemd_analyze_available():
            self.logger.debug("systemd-analyze not available; skipping verification of %s", path)
            return None

        res = self.actions.probe(["systemd-analyze", "verify", path], timeout=15)
        if res.returncode == 0:
            self.logger.debug("Unit file %s verified", path)
            return True
        detail = res.stderr.strip() or res.stdout.strip() or f"rc={res.returncode}"
        self.logger.warning(f"Unit file {path} did not verify cleanly: {detail}")
        return False
