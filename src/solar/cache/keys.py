"""Cache key schema.

Key format:
- record:{planet_id}            serialized planet JSON
- record:{planet_id}:image      raw image bytes
- rate:{client_address}:{minute} fixed-window request counter
"""

from __future__ import annotations


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    RECORD_PREFIX = "record"
    IMAGE_SUFFIX = "image"
    RATE_LIMIT_PREFIX = "rate"

    @classmethod
    def planet(cls, planet_id: str) -> str:
        """Key for a cached planet record."""
        return f"{cls.RECORD_PREFIX}:{planet_id}"

    @classmethod
    def planet_image(cls, planet_id: str) -> str:
        """Key for a cached planet image."""
        return f"{cls.RECORD_PREFIX}:{planet_id}:{cls.IMAGE_SUFFIX}"

    @classmethod
    def rate_limit(cls, client_address: str, minute: int) -> str:
        """Key for a client's request counter in the given wall-clock minute."""
        return f"{cls.RATE_LIMIT_PREFIX}:{client_address}:{minute}"

    @classmethod
    def parse_key(cls, key: str) -> dict[str, str] | None:
        """Parse a record key into its components.

        Returns None for keys outside the record namespace.
        """
        parts = key.split(":")
        if len(parts) not in (2, 3) or parts[0] != cls.RECORD_PREFIX or not parts[1]:
            return None
        if len(parts) == 3 and parts[2] != cls.IMAGE_SUFFIX:
            return None

        return {
            "prefix": parts[0],
            "planet_id": parts[1],
            "variant": parts[2] if len(parts) == 3 else "record",
        }
