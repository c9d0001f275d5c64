"""Provisioning tools for Raspberry Pi access points and LCD displays."""

__version__ = "0.1.0"
