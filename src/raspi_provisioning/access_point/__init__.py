"""Configure a Raspberry Pi as a Wi-Fi access point."""

__all__: list[str] = []
