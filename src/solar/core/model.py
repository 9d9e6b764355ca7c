"""Planet domain model.

Pydantic v2 models shared by the API, the cache and the primary store. The
same JSON shape is served over HTTP and stored under the record cache key.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

import orjson
from pydantic import BaseModel, ValidationError

from solar.core.errors import InternalProtocolError


class PlanetType(str, Enum):
    """Fixed planet categories."""

    TERRESTRIAL_PLANET = "TerrestrialPlanet"
    GAS_GIANT = "GasGiant"
    ICE_GIANT = "IceGiant"
    DWARF_PLANET = "DwarfPlanet"


class CatalogModel(BaseModel):
    """Base model for catalog entities."""

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
    }


class Satellite(CatalogModel):
    name: str
    first_spacecraft_landing_date: date | None = None


class Planet(CatalogModel):
    """A planet record.

    ``id`` is assigned by the primary store on creation and never changes
    afterwards. Client-supplied ids on create or update are ignored.
    """

    id: str | None = None
    name: str
    type: PlanetType
    mean_radius: float
    satellites: list[Satellite] | None = None

    def to_bytes(self) -> bytes:
        """Serialize to the JSON bytes stored in the cache."""
        return orjson.dumps(self.model_dump(mode="json"))

    @classmethod
    def from_bytes(cls, data: bytes) -> Planet:
        """Deserialize cached JSON bytes.

        Raises:
            InternalProtocolError: If the bytes are not a valid planet document.
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as exc:
            raise InternalProtocolError(f"Malformed cached planet: {exc}") from exc

    def without_id(self) -> Planet:
        return self.model_copy(update={"id": None})


class PlanetMessage(CatalogModel):
    """Minimal projection of a created planet sent to live subscribers."""

    id: str
    name: str
    type: PlanetType

    @classmethod
    def from_planet(cls, planet: Planet) -> PlanetMessage:
        if planet.id is None:
            raise InternalProtocolError("Planet.id is not specified")
        return cls(id=planet.id, name=planet.name, type=planet.type)

    def to_json(self) -> str:
        return orjson.dumps(self.model_dump(mode="json")).decode()
