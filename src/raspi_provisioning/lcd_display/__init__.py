"""Install, repair and restore an LCD display stack."""

__all__: list[str] = []
