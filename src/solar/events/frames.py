"""Server-sent event frames written to streaming clients."""

from __future__ import annotations

CONNECTED_FRAME = "data: Connected\n\n"
PING_FRAME = "data: Ping\n\n"


def planet_created_frame(payload: str) -> str:
    """Frame announcing a created planet; payload is a PlanetMessage JSON."""
    return f"data: Planet created: {payload}\n\n"


def decode_payload(data: bytes | str) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data
