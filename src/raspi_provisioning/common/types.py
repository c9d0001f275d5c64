"""Shared dataclasses and exceptions for the provisioning tools."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass
class CommandResult:
    cmd: list[str]
    returncode: int
    stdout: str
    stderr: str


class ProvisioningError(Exception):
    """Base class for failures that abort a provisioning run."""


class CommandFailedError(ProvisioningError):
    """An external command exited with an unexpected status."""

    def __init__(self, desc: str, result: CommandResult) -> None:
        detail = result.stderr.strip() or result.stdout.strip() or f"rc={result.returncode}"
        super().__init__(f"{desc} failed (rc={result.returncode}): {detail}")
        self.desc = desc
        self.result = result


class ConfigError(ProvisioningError):
    """Settings file is unreadable or contains invalid values."""


class NoWirelessInterfaceError(ProvisioningError):
    pass


class SubnetError(ProvisioningError):
    pass


class UnsupportedPackageManagerError(ProvisioningError):
    pass


class InvalidChoiceError(ProvisioningError):
    pass
