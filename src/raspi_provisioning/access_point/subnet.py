"""Derive the access point subnet from the uplink addressing."""

from __future__ import annotations

import ipaddress
import re

from raspi_provisioning.access_point.models import ApSubnet
from raspi_provisioning.common.types import SubnetError
from raspi_provisioning.config import AccessPointSettings

_INET_RE = re.compile(r"\binet\s+(\d+(?:\.\d+){3}/\d+)")


def parse_ipv4_cidr(ip_addr_output: str) -> str | None:
    """Return the first ``a.b.c.d/n`` found after ``inet`` in ip addr output."""

    match = _INET_RE.search(ip_addr_output)
    return match.group(1) if match else None


def _with_third_octet(octets: list[int], third: int, host: int) -> str:
    return f"{octets[0]}.{octets[1]}.{third}.{host}"


def derive_ap_subnet(
    current_cidr: str | None,
    settings: AccessPointSettings | None = None,
) -> ApSubnet:
    """Pick the AP subnet: the uplink's third octet plus one, or the default.

    ``192.168.1.0/24`` yields gateway ``192.168.2.1`` with a DHCP range of
    ``192.168.2.10``-``192.168.2.50``. Without an uplink the default gateway
    (``192.168.4.1``) is used with the same host range.
    """

    settings = settings or AccessPointSettings()
    start, end = settings.range_start_host, settings.range_end_host

    if current_cidr is None:
        octets = [int(part) for part in settings.default_gateway.split(".")]
        return ApSubnet(
            gateway=settings.default_gateway,
            range_start=_with_third_octet(octets, octets[2], start),
            range_end=_with_third_octet(octets, octets[2], end),
        )

    try:
        address = ipaddress.IPv4Interface(current_cidr).ip
    except ValueError as exc:
        raise SubnetError(f"Invalid uplink address {current_cidr!r}") from exc

    octets = [int(part) for part in str(address).split(".")]
    third = octets[2] + 1
    if third > 255:
        raise SubnetError(
            f"Cannot derive an AP subnet from {current_cidr}: third octet would exceed 255",
        )

    return ApSubnet(
        gateway=_with_third_octet(octets, third, 1),
        range_start=_with_third_octet(octets, third, start),
        range_end=_with_third_octet(octets, third, end),
        source_cidr=current_cidr,
    )


def is_adjacent_subnet(source_cidr: str, subnet: ApSubnet) -> bool:
    """True when the AP subnet is the uplink subnet with the third octet + 1.

    This is the only layout recognised as conflict free; any other overlap
    is reported to the operator rather than prevented.
    """

    source = source_cidr.split("/")[0].split(".")[:3]
    ap = subnet.gateway.split(".")[:3]
    return source[0] == ap[0] and source[1] == ap[1] and int(source[2]) == int(ap[2]) - 1
