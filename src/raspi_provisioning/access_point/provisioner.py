"""Access point pipeline: discover the host, then configure it."""

from __future__ import annotations

from collections.abc import Callable

from raspi_provisioning.access_point import config_files
from raspi_provisioning.access_point.credentials import generate_credentials
from raspi_provisioning.access_point.models import (
    AccessPointPlan,
    ApCredentials,
    ApSubnet,
    InterfaceInventory,
)
from raspi_provisioning.access_point.probes import NetworkProbe
from raspi_provisioning.access_point.subnet import derive_ap_subnet, is_adjacent_subnet
from raspi_provisioning.common.actions import ActionRunner
from raspi_provisioning.common.files import ConfigFileEditor
from raspi_provisioning.common.types import NoWirelessInterfaceError, SubnetError
from raspi_provisioning.config import AccessPointSettings
from raspi_provisioning.services import HealthReport, ServiceManager

SUPPORTED_OS = {"Raspbian", "Debian", "Ubuntu"}
AP_SERVICES = ["hostapd", "isc-dhcp-server"]
APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AccessPointProvisioner:
    """Configure the device as a Wi-Fi access point.

    ``discover`` only inspects the host and returns an :class:`AccessPointPlan`;
    ``apply`` performs every state change from that plan. Any failing command
    raises and aborts the remaining stages.
    """

    def __init__(
        self,
        settings: AccessPointSettings,
        actions: ActionRunner,
        files: ConfigFileEditor,
        *,
        probe: NetworkProbe | None = None,
        services: ServiceManager | None = None,
        credential_factory: Callable[[AccessPointSettings], ApCredentials] = generate_credentials,
    ) -> None:
        self.settings = settings
        self.actions = actions
        self.files = files
        self.logger = actions.logger
        self.probe = probe or NetworkProbe(actions, files)
        self.services = services or ServiceManager(actions)
        self._credential_factory = credential_factory

    def run(self) -> AccessPointPlan:
        self.logger.info("Starting Raspberry Pi Access Point setup...")
        plan = self.discover()
        self.apply(plan)
        self.logger.success("Raspberry Pi has been configured as an Access Point.")
        self.logger.success(f"SSID: {plan.credentials.ssid}")
        self.logger.success(f"Password: {plan.credentials.password}")
        self.logger.info(
            f"You can customize SSID and password by editing {config_files.HOSTAPD_CONF} "
            "and restarting hostapd.",
        )
        return plan

    # -- discovery -----------------------------------------------------

    def discover(self) -> AccessPointPlan:
        os_name, os_version = self.check_os()
        inventory = self.detect_interfaces()
        internet_iface = self.find_internet_interface(inventory)
        wifi_iface = self.select_wifi_interface(inventory)
        subnet = self.determine_ap_subnet(internet_iface)
        self.ensure_subnet_conflict_free(internet_iface, subnet)
        credentials = self.generate_credentials()
        return AccessPointPlan(
            os_name=os_name,
            os_version=os_version,
            inventory=inventory,
            internet_iface=internet_iface,
            wifi_iface=wifi_iface,
            subnet=subnet,
            credentials=credentials,
        )

    def check_os(self) -> tuple[str, str]:
        self.logger.info("Checking operating system compatibility...")
        name, version = self.probe.os_release()
        self.logger.info(f"Detected OS: {name} {version}".rstrip())
        if name not in SUPPORTED_OS:
            self.logger.warning("This tool is designed for Debian-based systems. Proceed with caution.")
        return name, version

    def detect_interfaces(self) -> InterfaceInventory:
        self.logger.info("Detecting network interfaces...")
        inventory = self.probe.inventory()

        if inventory.wired:
            self.logger.info(f"Wired interfaces detected: {' '.join(inventory.wired)}")
        else:
            self.logger.warning("No wired interfaces detected.")

        if not inventory.wireless:
            raise NoWirelessInterfaceError("No wireless interfaces detected.")
        self.logger.info(f"Wireless interfaces detected: {' '.join(inventory.wireless)}")
        return inventory

    def find_internet_interface(self, inventory: InterfaceInventory) -> str | None:
        self.logger.info("Checking for active internet connection on wired interfaces...")
        iface = self.probe.find_internet_interface(inventory.wired, self.settings.ping_target)
        if iface:
            self.logger.success(f"Internet-connected interface found: {iface}")
        else:
            self.logger.warning("No active internet-connected wired interfaces found.")
        return iface

    def select_wifi_interface(self, inventory: InterfaceInventory) -> str:
        self.logger.info("Selecting wireless interface for Access Point...")
        iface = inventory.wireless[0]
        self.logger.info(f"Selected wireless interface: {iface}")
        return iface

    def determine_ap_subnet(self, internet_iface: str | None) -> ApSubnet:
        current: str | None = None
        if internet_iface:
            current = self.probe.ipv4_cidr(internet_iface)
            if not current:
                raise SubnetError(f"Could not determine subnet for {internet_iface}.")
            self.logger.info(f"Current subnet for {internet_iface}: {current}")

        subnet = derive_ap_subnet(current, self.settings)
        self.logger.info(f"AP subnet set to: {subnet.gateway}")
        return subnet

    def ensure_subnet_conflict_free(self, internet_iface: str | None, subnet: ApSubnet) -> None:
        if not internet_iface or subnet.source_cidr is None:
            return
        if is_adjacent_subnet(subnet.source_cidr, subnet):
            return
        self.logger.warning("AP subnet may conflict with existing network subnets.")
        self.logger.info(
            f"You may need to manually adjust the AP subnet in {config_files.DHCPD_CONF} "
            f"and {config_files.DHCPCD_CONF}.",
        )

    def generate_credentials(self) -> ApCredentials:
        self.logger.info("Generating random SSID and password...")
        credentials = self._credential_factory(self.settings)
        self.logger.success(f"Generated SSID: {credentials.ssid}")
        self.logger.success(f"Generated Password: {credentials.password}")
        return credentials

    # -- configuration -------------------------------------------------

    def apply(self, plan: AccessPointPlan) -> HealthReport:
        self.install_packages()
        self.configure_static_ip(plan)
        self.configure_dhcp_server(plan)
        self.configure_hostapd(plan)
        self.configure_ip_forwarding(plan)
        self.configure_services()
        return self.services.health_check(AP_SERVICES, delay=self.settings.health_check_delay)

    def install_packages(self) -> None:
        self.logger.info("Updating package lists and installing required packages...")
        self.actions.apply("Update package lists", ["apt-get", "update"], timeout=None, env=APT_ENV)
        self.actions.apply(
            "Install access point packages",
            ["apt-get", "install", "-y", *self.settings.packages],
            timeout=None,
            env=APT_ENV,
        )
        for unit in AP_SERVICES:
            self.services.stop(unit)

    def configure_static_ip(self, plan: AccessPointPlan) -> None:
        self.logger.info(f"Configuring static IP for {plan.wifi_iface}...")
        path = config_files.DHCPCD_CONF
        self.files.backup(path)
        contents = config_files.strip_dhcpcd_block(self.files.read_text(path), plan.wifi_iface)
        if contents and not contents.endswith("\n"):
            contents += "\n"
        self.files.write_text(path, contents + config_files.render_dhcpcd_block(plan.wifi_iface, plan.subnet))
        self.services.restart("dhcpcd")
        self.logger.success(f"Static IP configured for {plan.wifi_iface}.")

    def configure_dhcp_server(self, plan: AccessPointPlan) -> None:
        self.logger.info("Configuring DHCP server...")
        self.files.backup(config_files.DHCPD_CONF, missing_ok=self.files.dry_run)
        self.files.write_text(
            config_files.DHCPD_CONF,
            config_files.render_dhcpd_conf(plan.subnet, self.settings),
        )
        self.files.edit(
            config_files.DHCP_DEFAULTS,
            lambda text: config_files.set_shell_variable(text, "INTERFACESv4", plan.wifi_iface),
        )
        self.logger.success("DHCP server configured.")

    def configure_hostapd(self, plan: AccessPointPlan) -> None:
        self.logger.info("Configuring hostapd...")
        self.files.write_text(
            config_files.HOSTAPD_CONF,
            config_files.render_hostapd_conf(plan.wifi_iface, plan.credentials, self.settings),
        )
        self.files.edit(
            config_files.HOSTAPD_DEFAULTS,
            lambda text: config_files.set_shell_variable(text, "DAEMON_CONF", config_files.HOSTAPD_CONF),
        )
        self.logger.success("hostapd configured.")

    def configure_ip_forwarding(self, plan: AccessPointPlan) -> None:
        self.logger.info("Enabling IP forwarding and configuring NAT...")
        self.files.edit(config_files.SYSCTL_CONF, config_files.enable_ip_forward)
        self.actions.apply("Reload sysctl settings", ["sysctl", "-p"])

        # Previous rules are optional state.
        self.files.backup(config_files.IPTABLES_RULES, missing_ok=True)

        self.actions.apply("Flush NAT rules", ["iptables", "-t", "nat", "-F"])
        for rule in config_files.nat_rules(plan.wifi_iface, plan.internet_iface, plan.subnet):
            self.actions.apply("Add forwarding rule", rule)
        self.actions.apply("Save iptables rules", ["netfilter-persistent", "save"])
        self.logger.success("IP forwarding and NAT configured.")

    def configure_services(self) -> None:
        self.logger.info("Enabling and starting services...")
        self.services.unmask("hostapd")
        for unit in AP_SERVICES:
            self.services.enable(unit)
        for unit in AP_SERVICES:
            self.services.start(unit)
        self.logger.success("Services enabled and started.")
