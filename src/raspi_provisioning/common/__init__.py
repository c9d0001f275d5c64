"""Shared shell, logging and file helpers for the provisioning tools."""

# Submodules are imported explicitly by callers so that importing the package
# has no side effects for tests.

__all__: list[str] = []
