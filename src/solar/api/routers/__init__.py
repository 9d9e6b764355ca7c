"""API routers for the planet catalog."""

from solar.api.routers import events, health, metrics, planets

__all__ = [
    "events",
    "health",
    "metrics",
    "planets",
]
