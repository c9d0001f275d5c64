"""Probe helpers for inspecting interfaces, uplink and OS release."""

from __future__ import annotations

import re

from raspi_provisioning.access_point.models import InterfaceInventory
from raspi_provisioning.access_point.subnet import parse_ipv4_cidr
from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.files import ConfigFileEditor

WIRED_RE = re.compile(r"^(eth|en)")
WIRELESS_RE = re.compile(r"^(wlan|wifi)")


class NetworkProbe:
    """Read-only inspection of the host; never changes system state."""

    def __init__(self, actions: ActionRunner, files: ConfigFileEditor) -> None:
        self.actions = actions
        self.files = files
        self.logger = actions.logger

    def list_interfaces(self) -> list[str]:
        """Return interface names from /sys/class/net in sorted order."""
        net_dir = self.files.resolve("/sys/class/net")
        try:
            return sorted(entry.name for entry in net_dir.iterdir())
        except OSError as exc:
            self.logger.debug("Cannot list %s: %s", net_dir, exc)
            return []

    def inventory(self) -> InterfaceInventory:
        names = self.list_interfaces()
        return InterfaceInventory(
            wired=[name for name in names if WIRED_RE.match(name)],
            wireless=[name for name in names if WIRELESS_RE.match(name)],
        )

    def link_up(self, iface: str) -> bool:
        res = self.actions.probe(["ip", "link", "show", iface])
        if res.returncode != 0:
            return False
        return "state UP" in res.stdout

    def can_reach(self, iface: str, host: str) -> bool:
        res = self.actions.probe(["ping", "-c", "1", "-I", iface, host], timeout=10)
        return res.returncode == 0

    def find_internet_interface(self, wired: list[str], host: str) -> str | None:
        for iface in wired:
            if self.link_up(iface) and self.can_reach(iface, host):
                return iface
        return None

    def ipv4_cidr(self, iface: str) -> str | None:
        res = self.actions.probe(["ip", "-4", "addr", "show", iface])
        if res.returncode != 0:
            return None
        return parse_ipv4_cidr(res.stdout)

    def os_release(self) -> tuple[str, str]:
        """Return (name, version) from lsb_release or /etc/os-release."""
        name_res = self.actions.probe(["lsb_release", "-si"])
        version_res = self.actions.probe(["lsb_release", "-sr"])
        if name_res.returncode == 0 and name_res.stdout.strip():
            return name_res.stdout.strip(), version_res.stdout.strip()

        if not self.files.exists("/etc/os-release"):
            return "unknown", ""

        fields: dict[str, str] = {}
        for line in self.files.read_text("/etc/os-release").splitlines():
            key, sep, value = line.partition("=")
            if sep:
                fields[key.strip()] = value.strip().strip('"')
        name = fields.get("ID", "unknown")
        return name.capitalize(), fields.get("VERSION_ID", "")
