"""Interactive install/restore menu for the LCD display tool."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO

from raspi_provisioning.common.logging_utils import DEFAULT_LOGGER
from raspi_provisioning.common.types import InvalidChoiceError
from raspi_provisioning.lcd_display.backup import BackupManager
from raspi_provisioning.lcd_display.installer import LcdDisplayInstaller


class LcdMenuSideEffects:
    '''Handle all printing and prompting for the LCD menu.'''

    def __init__(
        self,
        logger=DEFAULT_LOGGER,
        stdout: TextIO | None = None,
        input_func: Callable[[str], str] | None = None,
    ) -> None:
        self.logger = logger
        self.stdout = stdout or sys.stdout
        self._input = input_func or input

    def show_menu(self) -> str:
        print('Choose an option:', file=self.stdout)
        print('1) Install', file=self.stdout)
        print('2) Restore', file=self.stdout)
        return self._input('Enter your choice (1/2): ').strip()

    def show_invalid_choice(self) -> None:
        print('Invalid choice. Exiting.', file=self.stdout)


class LcdDisplayMenu:
    """Dispatch the numeric menu choice to backup/install or restore.

    The installer is built only when it is needed, so restore and invalid
    choices never probe for a package manager.
    """

    def __init__(
        self,
        backups: BackupManager,
        installer_factory: Callable[[], LcdDisplayInstaller],
        side_effects: LcdMenuSideEffects | None = None,
    ) -> None:
        self.backups = backups
        self.installer_factory = installer_factory
        self.side_effects = side_effects or LcdMenuSideEffects()

    def prompt(self) -> str:
        return self.side_effects.show_menu()

    def dispatch(self, choice: str) -> None:
        choice = choice.strip()
        if choice == "1":
            self.backups.backup()
            self.installer_factory().install()
        elif choice == "2":
            self.backups.restore()
        else:
            self.side_effects.show_invalid_choice()
            raise InvalidChoiceError(f"Invalid choice {choice!r}.")

    def run(self, choice: str | None = None) -> None:
        self.dispatch(self.prompt() if choice is None else choice)
