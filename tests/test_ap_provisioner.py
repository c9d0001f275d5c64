"""Tests for the access point discovery and configuration pipeline."""

import pytest

from raspi_provisioning.access_point.models import ApCredentials
from raspi_provisioning.access_point.probes import NetworkProbe
from raspi_provisioning.access_point.provisioner import AccessPointProvisioner
from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.files import ConfigFileEditor
from raspi_provisioning.common.types import CommandFailedError, NoWirelessInterfaceError, SubnetError
from raspi_provisioning.config import AccessPointSettings
from tests.helpers import RecordingLogger, RecordingShell, ok

ETH0_ADDR = "2: eth0: <UP>\n    inet 192.168.1.23/24 brd 192.168.1.255 scope global eth0\n"
FIXED_CREDS = ApCredentials(ssid="RPi_AP_Test01", password="Passw0rdPass")


def _sysroot(tmp_path, interfaces=("eth0", "lo", "wlan1", "wlan0")):
    net = tmp_path / "sys" / "class" / "net"
    net.mkdir(parents=True)
    for name in interfaces:
        (net / name).mkdir()
    etc = tmp_path / "etc"
    (etc / "default").mkdir(parents=True)
    (etc / "dhcp").mkdir()
    (etc / "dhcpcd.conf").write_text("hostname\nclientid\n")
    (etc / "dhcp" / "dhcpd.conf").write_text("# stock\n")
    (etc / "default" / "isc-dhcp-server").write_text('INTERFACESv4=""\nINTERFACESv6=""\n')
    (etc / "default" / "hostapd").write_text('#DAEMON_CONF=""\n')
    (etc / "sysctl.conf").write_text("#net.ipv4.ip_forward=1\n")
    return tmp_path


def _uplink_responses():
    return {
        ("lsb_release", "-si"): ok("Raspbian\n"),
        ("lsb_release", "-sr"): ok("11\n"),
        ("ip", "link", "show", "eth0"): ok("2: eth0: <BROADCAST,UP> mtu 1500 state UP mode DEFAULT\n"),
        ("ping", "-c", "1", "-I", "eth0", "8.8.8.8"): ok(),
        ("ip", "-4", "addr", "show", "eth0"): ok(ETH0_ADDR),
    }


def _provisioner(tmp_path, shell, dry_run=False):
    logger = RecordingLogger()
    actions = ActionRunner(shell=shell, logger=logger, dry_run=dry_run, sleep=lambda seconds: None)
    files = ConfigFileEditor(sysroot=tmp_path, logger=logger, dry_run=dry_run)
    return AccessPointProvisioner(
        AccessPointSettings(),
        actions,
        files,
        credential_factory=lambda settings: FIXED_CREDS,
    )


def test_inventory_lists_sorted_wired_and_wireless(tmp_path):
    root = _sysroot(tmp_path, interfaces=("wlan1", "enp3s0", "lo", "wifi0", "eth0", "wlan0", "docker0"))
    logger = RecordingLogger()
    probe = NetworkProbe(ActionRunner(shell=RecordingShell(), logger=logger), ConfigFileEditor(sysroot=root))

    inventory = probe.inventory()

    assert inventory.wired == ["enp3s0", "eth0"]
    assert inventory.wireless == ["wifi0", "wlan0", "wlan1"]


def test_os_release_falls_back_to_os_release_file(tmp_path):
    root = _sysroot(tmp_path)
    (root / "etc" / "os-release").write_text('ID=debian\nVERSION_ID="12"\n')
    shell = RecordingShell(default_rc=127)
    probe = NetworkProbe(ActionRunner(shell=shell, logger=RecordingLogger()), ConfigFileEditor(sysroot=root))

    assert probe.os_release() == ("Debian", "12")


def test_discover_with_uplink_builds_plan(tmp_path):
    root = _sysroot(tmp_path)
    provisioner = _provisioner(root, RecordingShell(responses=_uplink_responses()))

    plan = provisioner.discover()

    assert plan.os_name == "Raspbian"
    assert plan.internet_iface == "eth0"
    assert plan.wifi_iface == "wlan0"
    assert plan.subnet.cidr == "192.168.2.1/24"
    assert plan.subnet.range_start == "192.168.2.10"
    assert plan.subnet.range_end == "192.168.2.50"
    assert plan.credentials == FIXED_CREDS
    assert not provisioner.logger.has("may conflict")


def test_discover_without_uplink_uses_default_subnet(tmp_path):
    root = _sysroot(tmp_path)
    responses = _uplink_responses()
    responses[("ip", "link", "show", "eth0")] = ok("2: eth0: <NO-CARRIER> state DOWN\n")
    provisioner = _provisioner(root, RecordingShell(responses=responses))

    plan = provisioner.discover()

    assert plan.internet_iface is None
    assert plan.subnet.cidr == "192.168.4.1/24"
    assert (plan.subnet.range_start, plan.subnet.range_end) == ("192.168.4.10", "192.168.4.50")
    assert provisioner.logger.has("No active internet-connected wired interfaces found.")


def test_discover_fails_without_wireless_interface(tmp_path):
    root = _sysroot(tmp_path, interfaces=("eth0", "lo"))
    provisioner = _provisioner(root, RecordingShell(responses=_uplink_responses()))

    with pytest.raises(NoWirelessInterfaceError):
        provisioner.discover()


def test_discover_fails_when_uplink_has_no_ipv4(tmp_path):
    root = _sysroot(tmp_path)
    responses = _uplink_responses()
    responses[("ip", "-4", "addr", "show", "eth0")] = ok("2: eth0: <UP> state UP\n")
    provisioner = _provisioner(root, RecordingShell(responses=responses))

    with pytest.raises(SubnetError):
        provisioner.discover()


def test_unsupported_os_only_warns(tmp_path):
    root = _sysroot(tmp_path)
    responses = _uplink_responses()
    responses[("lsb_release", "-si")] = ok("Fedora\n")
    provisioner = _provisioner(root, RecordingShell(responses=responses))

    provisioner.discover()

    assert provisioner.logger.has("[WARNING] This tool is designed for Debian-based systems.")


def test_run_configures_all_files_and_services(tmp_path):
    root = _sysroot(tmp_path)
    shell = RecordingShell(responses=_uplink_responses())
    provisioner = _provisioner(root, shell)

    provisioner.run()

    dhcpcd = (root / "etc/dhcpcd.conf").read_text()
    assert "interface wlan0\n    static ip_address=192.168.2.1\n    nohook wpa_supplicant\n" in dhcpcd
    assert (root / "etc/dhcpcd.conf.backup").read_text() == "hostname\nclientid\n"
    assert (root / "etc/dhcp/dhcpd.conf.backup").read_text() == "# stock\n"
    assert "range 192.168.2.10 192.168.2.50;" in (root / "etc/dhcp/dhcpd.conf").read_text()
    assert 'INTERFACESv4="wlan0"' in (root / "etc/default/isc-dhcp-server").read_text()
    assert 'DAEMON_CONF="/etc/hostapd/hostapd.conf"' in (root / "etc/default/hostapd").read_text()
    hostapd = (root / "etc/hostapd/hostapd.conf").read_text()
    assert "ssid=RPi_AP_Test01" in hostapd
    assert "wpa_passphrase=Passw0rdPass" in hostapd
    assert (root / "etc/sysctl.conf").read_text() == "net.ipv4.ip_forward=1\n"

    calls = shell.calls
    assert ["apt-get", "install", "-y", "hostapd", "isc-dhcp-server", "iptables-persistent"] in calls
    assert ["iptables", "-t", "nat", "-A", "POSTROUTING", "-o", "eth0", "-j", "MASQUERADE"] in calls
    service_calls = [call for call in calls if call[:1] == ["systemctl"] and call[1] != "is-active"]
    assert service_calls == [
        ["systemctl", "stop", "hostapd"],
        ["systemctl", "stop", "isc-dhcp-server"],
        ["systemctl", "restart", "dhcpcd"],
        ["systemctl", "unmask", "hostapd"],
        ["systemctl", "enable", "hostapd"],
        ["systemctl", "enable", "isc-dhcp-server"],
        ["systemctl", "start", "hostapd"],
        ["systemctl", "start", "isc-dhcp-server"],
    ]
    assert calls.index(["netfilter-persistent", "save"]) < calls.index(["systemctl", "unmask", "hostapd"])
    assert calls[-2:] == [["systemctl", "is-active", "hostapd"], ["systemctl", "is-active", "isc-dhcp-server"]]
    assert provisioner.logger.has("[SUCCESS] SSID: RPi_AP_Test01")


def test_missing_iptables_rules_backup_is_tolerated(tmp_path):
    root = _sysroot(tmp_path)
    provisioner = _provisioner(root, RecordingShell(responses=_uplink_responses()))

    provisioner.run()

    assert not (root / "etc/iptables/rules.v4.backup").exists()


def test_failing_command_halts_remaining_steps(tmp_path):
    root = _sysroot(tmp_path)
    shell = RecordingShell(responses=_uplink_responses(), failing=[("apt-get", "install")])
    provisioner = _provisioner(root, shell)

    with pytest.raises(CommandFailedError):
        provisioner.run()

    assert shell.calls[-1][:2] == ["apt-get", "install"]
    assert not any(call[:1] == ["systemctl"] for call in shell.calls)
    assert (root / "etc/dhcpcd.conf").read_text() == "hostname\nclientid\n"
    assert not (root / "etc/hostapd/hostapd.conf").exists()


def test_dry_run_changes_nothing(tmp_path):
    root = _sysroot(tmp_path)
    shell = RecordingShell(responses=_uplink_responses())
    provisioner = _provisioner(root, shell, dry_run=True)

    provisioner.run()

    assert (root / "etc/dhcpcd.conf").read_text() == "hostname\nclientid\n"
    assert not (root / "etc/hostapd").exists()
    assert all(call[0] in {"lsb_release", "ip", "ping"} for call in shell.calls)


def test_dry_run_on_host_without_ap_packages(tmp_path):
    """Files created by the package install may be absent during a preview."""

    root = _sysroot(tmp_path)
    for relpath in ("etc/dhcp/dhcpd.conf", "etc/default/isc-dhcp-server", "etc/default/hostapd"):
        (root / relpath).unlink()
    shell = RecordingShell(responses=_uplink_responses())
    provisioner = _provisioner(root, shell, dry_run=True)

    plan = provisioner.run()

    assert plan.wifi_iface == "wlan0"
    assert not (root / "etc/dhcp/dhcpd.conf").exists()
    assert not (root / "etc/default/hostapd").exists()
    assert provisioner.logger.has("[WRITE] /etc/default/isc-dhcp-server")
    assert provisioner.logger.has("[WRITE] /etc/default/hostapd")
