from __future__ import annotations

import sys
from pathlib import Path


def _ensure_package_on_path() -> None:
    """Insert the source root into ``sys.path`` when run as a script.

    Running ``python __main__.py`` directly resolves imports as if this file
    lived at the top of ``sys.path``, so ``raspi_provisioning`` would not be
    importable with absolute imports. Adding the parent directory keeps the
    package importable both as ``python -m raspi_provisioning`` and as a
    stand-alone script.
    """

    package_dir = Path(__file__).resolve().parent
    source_root = str(package_dir.parent)
    if source_root not in sys.path:
        sys.path.insert(0, source_root)


def _load_app():
    _ensure_package_on_path()
    from raspi_provisioning.cli import app as cli_app

    return cli_app


app = _load_app()


def main() -> None:
    """Entrypoint for running the CLI application."""

    app()


if __name__ == "__main__":
    main()
