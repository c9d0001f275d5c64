"""Render and patch the dhcpcd, dhcpd, hostapd and sysctl files."""

from __future__ import annotations

import re

from raspi_provisioning.access_point.models import ApCredentials, ApSubnet
from raspi_provisioning.config import AccessPointSettings

DHCPCD_CONF = "/etc/dhcpcd.conf"
DHCPD_CONF = "/etc/dhcp/dhcpd.conf"
DHCP_DEFAULTS = "/etc/default/isc-dhcp-server"
HOSTAPD_CONF = "/etc/hostapd/hostapd.conf"
HOSTAPD_DEFAULTS = "/etc/default/hostapd"
SYSCTL_CONF = "/etc/sysctl.conf"
IPTABLES_RULES = "/etc/iptables/rules.v4"

DHCPCD_MARKER = "# Static IP configuration for Access Point"


def strip_dhcpcd_block(text: str, iface: str) -> str:
    """Drop an existing ``interface <iface>`` stanza and its indented body."""

    lines = text.splitlines(keepends=True)
    kept: list[str] = []
    skipping = False
    for line in lines:
        stripped = line.strip()
        if stripped == f"interface {iface}":
            skipping = True
            if kept and kept[-1].strip() == DHCPCD_MARKER:
                kept.pop()
                if kept and not kept[-1].strip():
                    kept.pop()
            continue
        if skipping:
            if not stripped or line[0] in " \t":
                continue
            skipping = False
        kept.append(line)
    return "".join(kept)


def render_dhcpcd_block(iface: str, subnet: ApSubnet) -> str:
    return (
        "\n"
        f"{DHCPCD_MARKER}\n"
        f"interface {iface}\n"
        f"    static ip_address={subnet.gateway}\n"
        "    nohook wpa_supplicant\n"
    )


def render_dhcpd_conf(subnet: ApSubnet, settings: AccessPointSettings) -> str:
    dns = ", ".join(settings.dns_servers)
    return (
        "# DHCP Configuration for Raspberry Pi Access Point\n"
        "\n"
        f"default-lease-time {settings.default_lease_time};\n"
        f"max-lease-time {settings.max_lease_time};\n"
        "\n"
        f"subnet {subnet.network} netmask {subnet.netmask} {{\n"
        f"    range {subnet.range_start} {subnet.range_end};\n"
        f"    option routers {subnet.gateway};\n"
        f"    option domain-name-servers {dns};\n"
        "}\n"
    )


def render_hostapd_conf(
    iface: str,
    credentials: ApCredentials,
    settings: AccessPointSettings,
) -> str:
    lines = [
        f"interface={iface}",
        "driver=nl80211",
        f"ssid={credentials.ssid}",
        f"hw_mode={settings.hw_mode}",
        f"channel={settings.channel}",
    ]
    if settings.country_code:
        lines.append(f"country_code={settings.country_code}")
    lines += [
        "wmm_enabled=1",
        "macaddr_acl=0",
        "auth_algs=1",
        "ignore_broadcast_ssid=0",
        "wpa=2",
        f"wpa_passphrase={credentials.password}",
        "wpa_key_mgmt=WPA-PSK",
        "rsn_pairwise=CCMP",
    ]
    return "\n".join(lines) + "\n"


def set_shell_variable(text: str, name: str, value: str) -> str:
    """Set ``NAME="value"`` in a /etc/default style file.

    A commented-out or existing assignment is replaced in place; otherwise the
    assignment is appended.
    """

    assignment = f'{name}="{value}"'
    pattern = re.compile(rf"^#?[ \t]*{re.escape(name)}=.*$", re.MULTILINE)
    if pattern.search(text):
        return pattern.sub(assignment, text, count=1)
    if text and not text.endswith("\n"):
        text += "\n"
    return f"{text}{assignment}\n"


def enable_ip_forward(text: str) -> str:
    """Uncomment ``net.ipv4.ip_forward=1`` or append it when absent."""

    updated = re.sub(
        r"^#[ \t]*net\.ipv4\.ip_forward[ \t]*=[ \t]*1[ \t]*$",
        "net.ipv4.ip_forward=1",
        text,
        count=1,
        flags=re.MULTILINE,
    )
    if re.search(r"^net\.ipv4\.ip_forward[ \t]*=[ \t]*1[ \t]*$", updated, flags=re.MULTILINE):
        return updated
    if updated and not updated.endswith("\n"):
        updated += "\n"
    return updated + "net.ipv4.ip_forward=1\n"


def nat_rules(wifi_iface: str, internet_iface: str | None, subnet: ApSubnet) -> list[list[str]]:
    """iptables invocations for NAT and forwarding, uplink or local-only."""

    if internet_iface:
        return [
            ["iptables", "-t", "nat", "-A", "POSTROUTING", "-o", internet_iface, "-j", "MASQUERADE"],
            [
                "iptables", "-A", "FORWARD", "-i", internet_iface, "-o", wifi_iface,
                "-m", "state", "--state", "RELATED,ESTABLISHED", "-j", "ACCEPT",
            ],
            ["iptables", "-A", "FORWARD", "-i", wifi_iface, "-o", internet_iface, "-j", "ACCEPT"],
        ]
    return [
        ["iptables", "-t", "nat", "-A", "POSTROUTING", "-s", subnet.cidr, "-o", wifi_iface, "-j", "MASQUERADE"],
        ["iptables", "-A", "FORWARD", "-s", subnet.cidr, "-j", "ACCEPT"],
    ]
