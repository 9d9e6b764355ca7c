"""Domain model, identifiers and errors for the planet catalog."""

from solar.core.errors import (
    CacheStoreUnavailableError,
    InternalProtocolError,
    NotFoundError,
    PrimaryStoreUnavailableError,
    SolarError,
    ThrottledError,
)
from solar.core.ids import generate_object_id, is_valid_object_id
from solar.core.model import Planet, PlanetMessage, PlanetType, Satellite

__all__ = [
    # Model
    "Planet",
    "PlanetMessage",
    "PlanetType",
    "Satellite",
    # Identifiers
    "generate_object_id",
    "is_valid_object_id",
    # Errors
    "SolarError",
    "NotFoundError",
    "PrimaryStoreUnavailableError",
    "CacheStoreUnavailableError",
    "InternalProtocolError",
    "ThrottledError",
]
