#!/usr/bin/env python3
"""Validate provisioning settings files before copying them to a device."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable


def iter_settings_files(paths: list[Path]) -> Iterable[Path]:
    """Yield YAML files from the given files and directories."""
    for path in paths:
        if path.is_dir():
            yield from sorted(path.rglob("*.yml"))
            yield from sorted(path.rglob("*.yaml"))
        elif path.is_file():
            yield path


def main() -> int:
    project_root = Path(__file__).resolve().parent.parent
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))

    from raspi_provisioning.common.types import ConfigError
    from raspi_provisioning.config import load_settings

    parser = argparse.ArgumentParser(description="Validate raspi-provisioning YAML settings files.")
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        default=[project_root / "config"],
        help="Files or directories to validate (default: ./config).",
    )
    args = parser.parse_args()

    files = list(iter_settings_files(args.paths))
    if not files:
        print("No settings files found.")
        return 0

    failures = 0
    for settings_file in files:
        try:
            load_settings(settings_file)
        except ConfigError as exc:
            print(f"ERROR: {settings_file}")
            print(exc)
            failures += 1
        else:
            print(f"OK: {settings_file}")

    if failures:
        print(f"Validation failed for {failures} file(s).")
        return 1

    print("All settings files validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
