"""Configuration file helpers rooted at a configurable system root."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

from raspi_provisioning.common.logging_utils import DEFAULT_LOGGER, LoggingManager
from raspi_provisioning.common.types import ProvisioningError


class ConfigFileEditor:
    """Read, back up and rewrite system files.

    Every absolute path handed to the editor is resolved below ``sysroot`` so
    the same code can target the live system or a scratch directory. Writes
    are logged and skipped in dry-run mode.
    """

    def __init__(
        self,
        *,
        sysroot: str | Path = "/",
        logger: LoggingManager = DEFAULT_LOGGER,
        dry_run: bool = False,
    ) -> None:
        self.sysroot = Path(sysroot)
        self.logger = logger
        self.dry_run = dry_run

    def resolve(self, path: str | Path) -> Path:
        return self.sysroot / str(path).lstrip("/")

    def exists(self, path: str | Path) -> bool:
        return self.resolve(path).exists()

    def read_text(self, path: str | Path) -> str:
        target = self.resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProvisioningError(f"Cannot read {path}: {exc}") from exc

    def write_text(self, path: str | Path, content: str) -> None:
        self.logger.log(f"[WRITE] {path}")
        if self.dry_run:
            self.logger.debug("Dry-run content for %s:\n%s", path, content)
            return
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ProvisioningError(f"Cannot write {path}: {exc}") from exc

    def append_text(self, path: str | Path, content: str) -> None:
        existing = self.read_text(path) if self.exists(path) else ""
        self.write_text(path, existing + content)

    def edit(self, path: str | Path, transform: Callable[[str], str]) -> bool:
        """Apply transform to the file contents; return True if it changed.

        In dry-run mode a missing file reads as empty, since the package
        install that would create it was skipped.
        """
        if self.dry_run and not self.exists(path):
            self.logger.debug("%s does not exist yet; previewing against an empty file", path)
            original = ""
        else:
            original = self.read_text(path)
        updated = transform(original)
        if updated == original:
            self.logger.debug("No changes needed for %s", path)
            return False
        self.write_text(path, updated)
        return True

    def copy(self, src: str | Path, dst: str | Path, *, missing_ok: bool = False) -> bool:
        """Copy src to dst; return False when src is absent and missing_ok."""
        source = self.resolve(src)
        if not source.exists():
            if missing_ok:
                self.logger.debug("Skipping copy of missing file %s", src)
                return False
            raise ProvisioningError(f"Cannot copy {src}: file does not exist")

        self.logger.log(f"[COPY] {src} -> {dst}")
        if self.dry_run:
            return True
        target = self.resolve(dst)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as exc:
            raise ProvisioningError(f"Cannot copy {src} to {dst}: {exc}") from exc
        return True

    def backup(self, path: str | Path, *, suffix: str = ".backup", missing_ok: bool = False) -> bool:
        return self.copy(path, f"{path}{suffix}", missing_ok=missing_ok)

    def makedirs(self, path: str | Path) -> None:
        self.logger.log(f"[MKDIR] {path}")
        if self.dry_run:
            return
        try:
            self.resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisioningError(f"Cannot create {path}: {exc}") from exc
