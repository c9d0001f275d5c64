"""Package manager strategies selected once per run."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence

from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.types import UnsupportedPackageManagerError


class PackageManager:
    """Abstract interface for update/install/query helpers."""

    name = "package-manager"
    update_cmd: list[str] = []
    install_cmd: list[str] = []
    query_cmd: list[str] = []
    update_ok_codes: tuple[int, ...] = (0,)
    env: dict[str, str] = {}

    def __init__(self, actions: ActionRunner) -> None:
        self.actions = actions

    def update(self) -> None:
        self.actions.apply(
            f"Refresh package metadata ({self.name})",
            list(self.update_cmd),
            ok_codes=self.update_ok_codes,
            timeout=None,
            env=self.env,
        )

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        self.actions.apply(
            f"Install {', '.join(packages)}",
            [*self.install_cmd, *packages],
            timeout=None,
            env=self.env,
        )

    def is_installed(self, package: str) -> bool:
        res = self.actions.probe([*self.query_cmd, package])
        return res.returncode == 0


class AptGetManager(PackageManager):
    name = "apt-get"
    update_cmd = ["apt-get", "update"]
    install_cmd = ["apt-get", "install", "-y"]
    query_cmd = ["dpkg", "-s"]
    env = {"DEBIAN_FRONTEND": "noninteractive"}


class DnfManager(PackageManager):
    name = "dnf"
    update_cmd = ["dnf", "check-update"]
    install_cmd = ["dnf", "install", "-y"]
    query_cmd = ["rpm", "-q"]
    # check-update exits 100 when updates are available.
    update_ok_codes = (0, 100)


class PacmanManager(PackageManager):
    name = "pacman"
    update_cmd = ["pacman", "-Sy"]
    install_cmd = ["pacman", "-S", "--noconfirm"]
    query_cmd = ["pacman", "-Qi"]


PACKAGE_MANAGERS: list[type[PackageManager]] = [AptGetManager, DnfManager, PacmanManager]


def detect_package_manager(
    actions: ActionRunner,
    which: Callable[[str], str | None] = shutil.which,
) -> PackageManager:
    """Return the first supported package manager found on PATH."""

    for manager_cls in PACKAGE_MANAGERS:
        if which(manager_cls.name):
            actions.logger.debug("Using package manager %s", manager_cls.name)
            return manager_cls(actions)
    raise UnsupportedPackageManagerError("Unsupported package manager (need apt-get, dnf or pacman).")
