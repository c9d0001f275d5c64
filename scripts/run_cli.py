#!/usr/bin/env python3
"""Launcher for the raspi_provisioning Typer CLI.

This helper adds the local ``src`` directory to ``sys.path`` so the
provisioning tools can be run on a device from a fresh checkout without
installing the package. All arguments are forwarded to the underlying
Typer application.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Invoke the CLI, ensuring the local source tree is importable."""
    project_root = Path(__file__).resolve().parents[1]
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))

    from raspi_provisioning.cli import app

    app(prog_name="raspi-provision", args=argv)


if __name__ == "__main__":
    main()
