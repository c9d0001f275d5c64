"""Settings for the provisioning tools, optionally loaded from YAML."""

from __future__ import annotations

import dataclasses
import ipaddress
from pathlib import Path
from typing import Any

import yaml
from yaml import YAMLError

from raspi_provisioning.common.logging_utils import DEFAULT_LOG_FILE
from raspi_provisioning.common.types import ConfigError


@dataclasses.dataclass
class AccessPointSettings:
    ssid_prefix: str = "RPi_AP_"
    ssid_suffix_length: int = 6
    password_length: int = 12
    channel: int = 7
    hw_mode: str = "g"
    country_code: str | None = None
    default_gateway: str = "192.168.4.1"
    range_start_host: int = 10
    range_end_host: int = 50
    dns_servers: list[str] = dataclasses.field(default_factory=lambda: ["8.8.8.8", "8.8.4.4"])
    ping_target: str = "8.8.8.8"
    default_lease_time: int = 600
    max_lease_time: int = 7200
    packages: list[str] = dataclasses.field(
        default_factory=lambda: ["hostapd", "isc-dhcp-server", "iptables-persistent"]
    )
    health_check_delay: float = 3.0

    def validate(self) -> None:
        if not 8 <= self.password_length <= 63:
            raise ConfigError("access_point.password_length must be between 8 and 63 (WPA2 limits)")
        if self.ssid_suffix_length < 1 or len(self.ssid_prefix) + self.ssid_suffix_length > 32:
            raise ConfigError("access_point SSID must be 1-32 characters (prefix + suffix)")
        if not 1 <= self.channel <= 14:
            raise ConfigError(f"access_point.channel must be 1-14, got {self.channel}")
        if self.hw_mode not in {"a", "b", "g"}:
            raise ConfigError(f"access_point.hw_mode must be one of a, b, g; got {self.hw_mode!r}")
        if not 2 <= self.range_start_host < self.range_end_host <= 254:
            raise ConfigError("access_point DHCP range must satisfy 2 <= start < end <= 254")
        if self.default_lease_time <= 0 or self.max_lease_time < self.default_lease_time:
            raise ConfigError("access_point lease times must be positive and max >= default")
        for addr in [self.default_gateway, self.ping_target, *self.dns_servers]:
            try:
                ipaddress.IPv4Address(addr)
            except ValueError as exc:
                raise ConfigError(f"access_point: invalid IPv4 address {addr!r}") from exc


@dataclasses.dataclass
class LcdDisplaySettings:
    backup_dir: str = "/backup_lcd_display"
    boot_config: str = "/boot/config.txt"
    bash_profile: str | None = None
    driver_repo: str = "https://github.com/goodtft/LCD-show.git"
    driver_dir: str = "LCD-show"
    driver_script: str = "MPI4008-show"
    fbcp_repo: str = "https://github.com/tasanakorn/rpi-fbcp"
    fbcp_binary: str = "/usr/local/bin/fbcp"
    service_unit: str = "/etc/systemd/system/fbcp.service"
    work_dir: str = "."
    extra_packages: list[str] = dataclasses.field(default_factory=lambda: ["git", "cmake"])
    x_start_wait: float = 5.0
    health_check_delay: float = 2.0

    @property
    def bash_profile_path(self) -> str:
        return self.bash_profile or str(Path.home() / ".bash_profile")

    def validate(self) -> None:
        for name in ("backup_dir", "boot_config", "fbcp_binary", "service_unit"):
            if not str(getattr(self, name)).startswith("/"):
                raise ConfigError(f"lcd_display.{name} must be an absolute path")
        if self.x_start_wait < 0 or self.health_check_delay < 0:
            raise ConfigError("lcd_display wait times must not be negative")


@dataclasses.dataclass
class ProvisioningSettings:
    log_file: str | None = DEFAULT_LOG_FILE
    sysroot: str = "/"
    access_point: AccessPointSettings = dataclasses.field(default_factory=AccessPointSettings)
    lcd_display: LcdDisplaySettings = dataclasses.field(default_factory=LcdDisplaySettings)

    def validate(self) -> None:
        self.access_point.validate()
        self.lcd_display.validate()


def _build(cls: type, data: Any, section: str):
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigError(f"{section}: expected a mapping, got {type(data).__name__}")

    known = {field.name for field in dataclasses.fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{section}: unknown keys {unknown}")
    try:
        return cls(**data)
    except TypeError as exc:  # pragma: no cover - guarded by the key check above
        raise ConfigError(f"{section}: {exc}") from exc


def settings_from_dict(data: dict[str, Any] | None) -> ProvisioningSettings:
    """Build validated settings from a parsed YAML mapping."""

    data = dict(data or {})
    access_point = _build(AccessPointSettings, data.pop("access_point", None), "access_point")
    lcd_display = _build(LcdDisplaySettings, data.pop("lcd_display", None), "lcd_display")
    settings = _build(ProvisioningSettings, data, "settings")
    settings.access_point = access_point
    settings.lcd_display = lcd_display
    settings.validate()
    return settings


def load_settings(path: str | Path | None = None) -> ProvisioningSettings:
    """Load settings from a YAML file, or return validated defaults."""

    if path is None:
        settings = ProvisioningSettings()
        settings.validate()
        return settings

    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except YAMLError as exc:
        raise ConfigError(f"{config_path}: invalid YAML ({exc})") from exc
    except OSError as exc:
        raise ConfigError(f"{config_path}: cannot read settings ({exc})") from exc

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"{config_path}: top level must be a mapping")
    return settings_from_dict(data)
