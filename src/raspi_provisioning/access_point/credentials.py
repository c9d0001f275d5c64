"""Random SSID and passphrase generation."""

from __future__ import annotations

import secrets
import string

from raspi_provisioning.access_point.models import ApCredentials
from raspi_provisioning.config import AccessPointSettings

ALPHABET = string.ascii_letters + string.digits


def random_token(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_credentials(settings: AccessPointSettings | None = None) -> ApCredentials:
    settings = settings or AccessPointSettings()
    return ApCredentials(
        ssid=f"{settings.ssid_prefix}{random_token(settings.ssid_suffix_length)}",
        password=random_token(settings.password_length),
    )
