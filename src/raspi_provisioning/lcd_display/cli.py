"""Entry point wiring for the LCD display tool."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.files import ConfigFileEditor
from raspi_provisioning.common.logging_utils import (
    DEFAULT_LOGGER,
    LoggingManager,
)
from raspi_provisioning.common.shell import ShellRunner
from raspi_provisioning.common.types import InvalidChoiceError, ProvisioningError
from raspi_provisioning.config import ProvisioningSettings
from raspi_provisioning.lcd_display.backup import BackupManager
from raspi_provisioning.lcd_display.installer import LcdDisplayInstaller
from raspi_provisioning.lcd_display.menus import LcdDisplayMenu, LcdMenuSideEffects


class LcdDisplaySideEffects:
    """Handle logging and console output for the LCD display app."""

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
            "       Try: sudo raspi-provision lcd-display",
            file=self.stderr,
        )
        self.logger.error("Please run as root.")

    def log_dry_run(self) -> None:
        self.logger.info("Dry-run mode enabled (no changes will be made).")

    def log_failure(self, exc: ProvisioningError) -> None:
        self.logger.error(str(exc))


class LcdDisplayApp:
    """Run the install/restore menu and translate failures to exit codes."""

    def __init__(
        self,
        settings: ProvisioningSettings,
        choice: str | None,
        dry_run: bool,
        verbose: bool,
        side_effects: LcdDisplaySideEffects | None = None,
        menu_side_effects: LcdMenuSideEffects | None = None,
    ) -> None:
        self.settings = settings
        self.choice = choice
        self.dry_run = dry_run
        self.verbose = verbose
        self.side_effects = side_effects or LcdDisplaySideEffects()
        self.menu_side_effects = menu_side_effects

    def run(self) -> int:
        self.side_effects.setup_logging(self.verbose, self.settings.log_file)
        if not self._ensure_root():
            return 1
        if self.dry_run:
            self.side_effects.log_dry_run()

        try:
            self._build_menu().run(self.choice)
        except InvalidChoiceError:
            return 1
        except ProvisioningError as exc:
            self.side_effects.log_failure(exc)
            return 1
        return 0

    def _ensure_root(self) -> bool:
        if hasattr(os, "geteuid") and os.geteuid() != 0:
            self.side_effects.warn_not_root()
            return False
        return True

    def _build_menu(self) -> LcdDisplayMenu:
        logger = self.side_effects.logger
        lcd = self.settings.lcd_display
        actions = ActionRunner(shell=ShellRunner(logger=logger), logger=logger, dry_run=self.dry_run)
        files = ConfigFileEditor(sysroot=self.settings.sysroot, logger=logger, dry_run=self.dry_run)
        return LcdDisplayMenu(
            backups=BackupManager(lcd, files),
            installer_factory=lambda: LcdDisplayInstaller(lcd, actions, files),
            side_effects=self.menu_side_effects or LcdMenuSideEffects(logger=logger),
        )


class LcdDisplayRunner:
    """Facade for constructing and executing the LCD display app."""

    def __init__(self) -> None:
        self._app_class = LcdDisplayApp

    def run(
        self,
        settings: ProvisioningSettings,
        choice: str | None = None,
        dry_run: bool = False,
        verbose: bool = False,
    ) -> int:
        app = self._app_class(settings=settings, choice=choice, dry_run=dry_run, verbose=verbose)
        return app.run()


DEFAULT_RUNNER = LcdDisplayRunner()
