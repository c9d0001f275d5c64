"""Entry point wiring for the access point tool."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from raspi_provisioning.access_point.models import AccessPointPlan
from raspi_provisioning.access_point.provisioner import AccessPointProvisioner
from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.files import ConfigFileEditor
from raspi_provisioning.common.logging_utils import (
    DEFAULT_LOGGER,
    LoggingManager,
)
from raspi_provisioning.common.shell import ShellRunner
from raspi_provisioning.common.types import ProvisioningError
from raspi_provisioning.config import ProvisioningSettings


class AccessPointSideEffects:
    """Handle logging and console output for the access point app."""

    def __init__(
        self,
        logger: LoggingManager = DEFAULT_LOGGER,
        stderr: TextIO | None = None,
    ) -> None:
        self.logger = logger
        self.stderr = stderr or sys.stderr

    def setup_logging(self, verbose: bool, log_file: str | None) -> None:
        self.logger.setup(verbose, log_file=log_file)

    def warn_not_root(self) -> None:
        print(
            "ERROR: This tool must be run as root.\n"
            "       Try: sudo raspi-provision access-point",
            file=self.stderr,
        )
        self.logger.error("Please run as root (use sudo).")

    def log_dry_run(self) -> None:
        self.logger.info("Dry-run mode enabled (no changes will be made).")

    def log_failure(self, exc: ProvisioningError) -> None:
        self.logger.error(f"{exc} Exiting.")


class AccessPointApp:
    """Run the access point pipeline and translate failures to exit codes."""

    def __init__(
        self,
        settings: ProvisioningSettings,
        dry_run: bool,
        verbose: bool,
        side_effects: AccessPointSideEffects | None = None,
    ) -> None:
        self.settings = settings
        self.dry_run = dry_run
        self.verbose = verbose
        self.side_effects = side_effects or AccessPointSideEffects()
        self.plan: AccessPointPlan | None = None

    def run(self) -> int:
        self.side_effects.setup_logging(self.verbose, self.settings.log_file)
        if not self._ensure_root():
            return 1
        if self.dry_run:
            self.side_effects.log_dry_run()

        try:
            self.plan = self._build_provisioner().run()
        except ProvisioningError as exc:
            self.side_effects.log_failure(exc)
            return 1
        return 0

    def _ensure_root(self) -> bool:
        if hasattr(os, "geteuid") and os.geteuid() != 0:
            self.side_effects.warn_not_root()
            return False
        return True

    def _build_provisioner(self) -> AccessPointProvisioner:
        logger = self.side_effects.logger
        actions = ActionRunner(shell=ShellRunner(logger=logger), logger=logger, dry_run=self.dry_run)
        files = ConfigFileEditor(sysroot=self.settings.sysroot, logger=logger, dry_run=self.dry_run)
        return AccessPointProvisioner(self.settings.access_point, actions, files)


class AccessPointRunner:
    """Facade for constructing and executing the access point app."""

    def __init__(self) -> None:
        self._app_class = AccessPointApp
        self.last_app: AccessPointApp | None = None

    def run(
        self,
        settings: ProvisioningSettings,
        dry_run: bool = False,
        verbose: bool = False,
    ) -> int:
        app = self._app_class(settings=settings, dry_run=dry_run, verbose=verbose)
        self.last_app = app
        return app.run()


DEFAULT_RUNNER = AccessPointRunner()
