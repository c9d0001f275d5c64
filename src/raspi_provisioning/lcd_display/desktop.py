"""Desktop environment package sets keyed by distribution release marker."""

from __future__ import annotations

import dataclasses

from raspi_provisioning.common.files import ConfigFileEditor


@dataclasses.dataclass(frozen=True)
class DesktopProfile:
    name: str
    marker: str | None
    packages: tuple[str, ...]
    browser: str = "chromium"


DEBIAN = DesktopProfile(
    name="debian",
    marker="/etc/debian_version",
    packages=("xserver-xorg", "xinit", "lightdm", "xfce4"),
)
FEDORA = DesktopProfile(
    name="fedora",
    marker="/etc/fedora-release",
    packages=("xorg-x11-server-Xorg", "xorg-x11-xinit", "lightdm", "xfce4-session"),
)
ARCH = DesktopProfile(
    name="arch",
    marker="/etc/arch-release",
    packages=("xorg-server", "xorg-xinit", "lightdm", "xfce4"),
)
FALLBACK = dataclasses.replace(DEBIAN, name="default", marker=None)

PROFILES: tuple[DesktopProfile, ...] = (DEBIAN, FEDORA, ARCH)


def detect_desktop_profile(files: ConfigFileEditor) -> DesktopProfile:
    for profile in PROFILES:
        if profile.marker and files.exists(profile.marker):
            return profile
    return FALLBACK
