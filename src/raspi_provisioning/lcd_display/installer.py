"""Install or repair the LCD display stack."""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Mapping
from pathlib import Path

from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.files import ConfigFileEditor
from raspi_provisioning.config import LcdDisplaySettings
from raspi_provisioning.lcd_display.desktop import DesktopProfile, detect_desktop_profile
from raspi_provisioning.lcd_display.package_managers import PackageManager, detect_package_manager
from raspi_provisioning.services import ServiceManager

FBCP_UNIT_NAME = "fbcp.service"


def render_fbcp_unit(binary: str) -> str:
    return (
        "[Unit]\n"
        "Description=fbcp display mirroring service\n"
        "After=network.target\n"
        "\n"
        "[Service]\n"
        "Type=simple\n"
        f"ExecStart={binary}\n"
        "Restart=always\n"
        "\n"
        "[Install]\n"
        "WantedBy=multi-user.target\n"
    )


class LcdDisplayInstaller:
    """Bring up X, the LCD driver and the fbcp mirroring service."""

    def __init__(
        self,
        settings: LcdDisplaySettings,
        actions: ActionRunner,
        files: ConfigFileEditor,
        *,
        package_manager: PackageManager | None = None,
        desktop: DesktopProfile | None = None,
        services: ServiceManager | None = None,
        which: Callable[[str], str | None] = shutil.which,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.actions = actions
        self.files = files
        self.logger = actions.logger
        self.which = which
        self.package_manager = package_manager or detect_package_manager(actions, which=which)
        self.desktop = desktop or detect_desktop_profile(files)
        self.services = services or ServiceManager(actions)
        self.environ = os.environ if environ is None else environ

    @property
    def work_dir(self) -> Path:
        return Path(self.settings.work_dir).resolve()

    def required_packages(self) -> list[str]:
        return [*self.desktop.packages, self.desktop.browser, *self.settings.extra_packages]

    def check_requirements(self) -> list[str]:
        """Return the required packages that are not installed."""
        self.logger.info("Checking required packages...")
        missing = [pkg for pkg in self.required_packages() if not self.package_manager.is_installed(pkg)]
        if missing:
            self.logger.info(f"Missing packages: {' '.join(missing)}")
        else:
            self.logger.info("All required packages are installed.")
        return missing

    def install(self) -> None:
        self.logger.info("Starting installation for the LCD display...")
        if self.check_requirements():
            self.logger.info("Updating the system...")
            self.package_manager.update()
            self.logger.info("Installing required software...")
            self.package_manager.install(self.required_packages())

        self.ensure_x_server()
        self.install_lcd_driver()
        self.install_fbcp()
        self.ensure_fbcp_running()
        self.install_fbcp_service()
        self.logger.success("Installation completed successfully.")

    def _process_running(self, name: str) -> bool:
        return self.actions.probe(["pgrep", name]).returncode == 0

    def _over_ssh(self) -> bool:
        return bool(self.environ.get("SSH_CLIENT") or self.environ.get("SSH_TTY"))

    def ensure_x_server(self) -> None:
        if self._process_running("X"):
            self.logger.debug("X server already running")
            return

        self.logger.info("X server is not running. Starting X server...")
        if self._over_ssh():
            self.actions.spawn("Start X server on :0", ["startx", "--", ":0"], env={"DISPLAY": ":0"})
        else:
            self.actions.spawn("Start X server", ["startx"])
        self.actions.wait(self.settings.x_start_wait, "X server startup")

    def install_lcd_driver(self) -> None:
        driver_dir = self.work_dir / self.settings.driver_dir
        if driver_dir.is_dir():
            self.logger.debug("LCD driver checkout present at %s", driver_dir)
            return

        self.logger.info("LCD drivers not found. Installing LCD drivers...")
        self.actions.apply(
            "Clone LCD driver repository",
            ["git", "clone", self.settings.driver_repo, str(driver_dir)],
            timeout=None,
        )
        self.actions.apply("Make LCD driver scripts executable", ["chmod", "-R", "755", str(driver_dir)])
        self.actions.apply(
            f"Run LCD driver installer {self.settings.driver_script}",
            [f"./{self.settings.driver_script}"],
            timeout=None,
            cwd=str(driver_dir),
        )

    def install_fbcp(self) -> None:
        if self.which("fbcp"):
            self.logger.debug("fbcp already on PATH")
            return

        self.logger.info("Installing fbcp...")
        source = self.work_dir / "rpi-fbcp"
        build = source / "build"
        if not source.is_dir():
            self.actions.apply(
                "Clone fbcp repository",
                ["git", "clone", self.settings.fbcp_repo, str(source)],
                timeout=None,
            )
        self.actions.apply("Configure fbcp build", ["cmake", "-S", str(source), "-B", str(build)], timeout=None)
        self.actions.apply("Build fbcp", ["make", "-C", str(build)], timeout=None)
        self.actions.apply(
            "Install fbcp binary",
            ["install", str(build / "fbcp"), self.settings.fbcp_binary],
        )

    def ensure_fbcp_running(self) -> None:
        if self._process_running("fbcp"):
            return
        self.logger.info("Starting fbcp...")
        self.actions.spawn("Start fbcp", [self.settings.fbcp_binary])

    def install_fbcp_service(self) -> None:
        unit_path = self.settings.service_unit
        if self.files.exists(unit_path):
            self.logger.debug("%s already installed", unit_path)
            return

        self.files.write_text(unit_path, render_fbcp_unit(self.settings.fbcp_binary))
        if not self.actions.dry_run:
            self.services.verify_unit(str(self.files.resolve(unit_path)))
        self.services.daemon_reload()
        self.services.enable(FBCP_UNIT_NAME)
        self.services.start(FBCP_UNIT_NAME)
        self.services.health_check([FBCP_UNIT_NAME], delay=self.settings.health_check_delay)
