"""Binary asset storage (planet images)."""

from solar.storage.images import LocalImageStorage

__all__ = ["LocalImageStorage"]
