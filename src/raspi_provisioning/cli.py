"""Console entrypoints for the provisioning toolkit."""

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from raspi_provisioning.access_point.cli import DEFAULT_RUNNER as AP_RUNNER
from raspi_provisioning.access_point.models import AccessPointPlan
from raspi_provisioning.common.types import ConfigError
from raspi_provisioning.config import ProvisioningSettings, load_settings
from raspi_provisioning.lcd_display.cli import DEFAULT_RUNNER as LCD_RUNNER


def render_access_point_summary(plan: AccessPointPlan) -> Panel:
    """Build a rich panel describing the configured access point."""

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("SSID", plan.credentials.ssid)
    table.add_row("Password", plan.credentials.password)
    table.add_row("Wi-Fi interface", plan.wifi_iface)
    table.add_row("Uplink", plan.internet_iface or "none (local routing only)")
    table.add_row("Gateway", plan.subnet.cidr)
    table.add_row("DHCP range", f"{plan.subnet.range_start} - {plan.subnet.range_end}")
    return Panel(table, title="Access Point ready", border_style="green")


class ProvisioningCLI:
    """Object-oriented wrapper for the Typer command-line interface."""

    def __init__(self) -> None:
        self.ap_runner = AP_RUNNER
        self.lcd_runner = LCD_RUNNER
        self.console = Console(force_terminal=False)
        self.app = typer.Typer(help="Raspberry Pi access point and LCD display provisioning.")
        self.app.command("access-point")(self._access_point)
        self.app.command("lcd-display")(self._lcd_display)

    def _load(self, config: str | None) -> ProvisioningSettings:
        try:
            return load_settings(config)
        except ConfigError as exc:
            typer.echo(f"Invalid settings: {exc}", err=True)
            raise typer.Exit(code=1) from exc

    def _access_point(
        self,
        dry_run: bool = typer.Option(
            False,
            "--dry-run",
            help="Log actions but do not make changes.",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            help="Enable verbose debug logging.",
        ),
        config: str | None = typer.Option(
            None,
            "--config",
            "-c",
            help="Optional YAML settings file.",
        ),
    ) -> None:
        """Configure this device as a Wi-Fi access point."""

        settings = self._load(config)
        exit_code = self.ap_runner.run(settings=settings, dry_run=dry_run, verbose=verbose)

        app = self.ap_runner.last_app
        if exit_code == 0 and app is not None and app.plan is not None:
            self.console.print(render_access_point_summary(app.plan))
        raise typer.Exit(code=exit_code)

    def _lcd_display(
        self,
        choice: str | None = typer.Option(
            None,
            "--choice",
            help="Menu choice to run without prompting: 1=install, 2=restore.",
        ),
        dry_run: bool = typer.Option(
            False,
            "--dry-run",
            help="Log actions but do not make changes.",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            help="Enable verbose debug logging.",
        ),
        config: str | None = typer.Option(
            None,
            "--config",
            "-c",
            help="Optional YAML settings file.",
        ),
    ) -> None:
        """Install/repair the LCD display stack or restore backups."""

        settings = self._load(config)
        exit_code = self.lcd_runner.run(
            settings=settings,
            choice=choice,
            dry_run=dry_run,
            verbose=verbose,
        )
        raise typer.Exit(code=exit_code)

    def run(self) -> None:
        """Invoke the Typer application."""
        self.app()


cli = ProvisioningCLI()
app = cli.app


if __name__ == "__main__":
    cli.run()
