"""Tests for running the package as a script or module."""

from __future__ import annotations

import runpy
import sys
from pathlib import Path

import typer

SCRIPT = Path(__file__).resolve().parents[1] / "src" / "raspi_provisioning" / "__main__.py"


def test_script_run_puts_source_root_on_path(monkeypatch):
    """Executing __main__.py directly must still import raspi_provisioning."""

    source_root = str(SCRIPT.parent.parent)
    # Mimic `python src/raspi_provisioning/__main__.py`: the package directory comes first.
    trimmed = [str(SCRIPT.parent)] + [entry for entry in sys.path if entry not in {str(SCRIPT.parent), source_root}]
    monkeypatch.setattr(sys, "path", trimmed)

    namespace = runpy.run_path(str(SCRIPT), run_name="__not_main__")

    assert source_root in sys.path
    assert isinstance(namespace["app"], typer.Typer)
    assert callable(namespace["main"])


def test_module_exposes_cli_app():
    from raspi_provisioning import __main__ as entry
    from raspi_provisioning.cli import app

    assert entry.app is app
