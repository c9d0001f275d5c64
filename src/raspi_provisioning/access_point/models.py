"""Dataclasses threaded through the access point pipeline."""

from __future__ import annotations

import dataclasses
import ipaddress


@dataclasses.dataclass
class InterfaceInventory:
    wired: list[str]
    wireless: list[str]


@dataclasses.dataclass(frozen=True)
class ApSubnet:
    """Addressing handed out on the access point side."""

    gateway: str
    range_start: str
    range_end: str
    prefix: int = 24
    source_cidr: str | None = None

    @property
    def cidr(self) -> str:
        return f"{self.gateway}/{self.prefix}"

    @property
    def network(self) -> str:
        return str(ipaddress.ip_interface(self.cidr).network.network_address)

    @property
    def netmask(self) -> str:
        return str(ipaddress.ip_interface(self.cidr).netmask)


@dataclasses.dataclass(frozen=True)
class ApCredentials:
    ssid: str
    password: str


@dataclasses.dataclass
class AccessPointPlan:
    """Everything the pipeline learned before touching the system."""

    os_name: str
    os_version: str
    inventory: InterfaceInventory
    internet_iface: str | None
    wifi_iface: str
    subnet: ApSubnet
    credentials: ApCredentials
