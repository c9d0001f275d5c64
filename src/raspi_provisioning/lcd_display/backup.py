"""Backup and restore of the files the LCD driver install rewrites."""

from __future__ import annotations

import posixpath

from raspi_provisioning.common.files import ConfigFileEditor
from raspi_provisioning.config import LcdDisplaySettings


class BackupManager:
    def __init__(self, settings: LcdDisplaySettings, files: ConfigFileEditor) -> None:
        self.settings = settings
        self.files = files
        self.logger = files.logger

    def pairs(self) -> list[tuple[str, str]]:
        """Return (original, backup copy) paths."""
        backup_dir = self.settings.backup_dir
        return [
            (self.settings.boot_config, posixpath.join(backup_dir, "config.txt.bak")),
            (self.settings.bash_profile_path, posixpath.join(backup_dir, "bash_profile.bak")),
        ]

    def backup(self) -> list[str]:
        self.logger.info("Creating backups...")
        self.files.makedirs(self.settings.backup_dir)
        saved = [src for src, dst in self.pairs() if self.files.copy(src, dst, missing_ok=True)]
        self.logger.success(f"Backups completed and stored in {self.settings.backup_dir}.")
        return saved

    def restore(self) -> list[str]:
        self.logger.info("Restoring backups...")
        restored = [src for src, dst in self.pairs() if self.files.copy(dst, src, missing_ok=True)]
        if not restored:
            self.logger.warning(f"No backups found in {self.settings.backup_dir}.")
        self.logger.success("Restore completed.")
        return restored
