"""Planet catalog endpoints.

Read routes are always mounted. Write routes live on ``write_router`` and
are only mounted when ENABLE_WRITING_HANDLERS is set.

Endpoints:
    GET    /planets                 list, optional ?type= filter, rate limited
    GET    /planets/{planet_id}     single planet
    GET    /planets/{planet_id}/image
    POST   /planets                 create (write)
    PUT    /planets/{planet_id}     update (write)
    DELETE /planets/{planet_id}     delete (write)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import Response

from solar.api.deps import PlanetServiceDep, enforce_rate_limit
from solar.core.model import Planet, PlanetType
from solar.storage.images import LocalImageStorage

router = APIRouter(tags=["Planets"])
write_router = APIRouter(tags=["Planets"])

PlanetId = Annotated[str, Path(description="Planet identifier (24 hex chars)")]


@router.get(
    "/planets",
    response_model=list[Planet],
    dependencies=[Depends(enforce_rate_limit)],
)
async def get_planets(
    service: PlanetServiceDep,
    planet_type: Annotated[
        PlanetType | None, Query(alias="type", description="Filter by planet category")
    ] = None,
) -> list[Planet]:
    """List planets, optionally filtered by category."""
    return await service.list_planets(planet_type)


@router.get("/planets/{planet_id}", response_model=Planet)
async def get_planet(planet_id: PlanetId, service: PlanetServiceDep) -> Planet:
    """Get a planet by id."""
    return await service.get_planet(planet_id)


@router.get(
    "/planets/{planet_id}/image",
    response_class=Response,
    responses={200: {"content": {LocalImageStorage.CONTENT_TYPE: {}}}},
)
async def get_planet_image(planet_id: PlanetId, service: PlanetServiceDep) -> Response:
    """Get the image of a planet."""
    image = await service.get_planet_image(planet_id)
    return Response(content=image, media_type=LocalImageStorage.CONTENT_TYPE)


@write_router.post("/planets", response_model=Planet)
async def create_planet(planet: Planet, service: PlanetServiceDep) -> Planet:
    """Create a planet; the response carries its new id."""
    return await service.create_planet(planet)


@write_router.put("/planets/{planet_id}", response_model=Planet)
async def update_planet(planet_id: PlanetId, planet: Planet, service: PlanetServiceDep) -> Planet:
    """Replace a planet's attributes."""
    return await service.update_planet(planet_id, planet)


@write_router.delete("/planets/{planet_id}", response_class=Response)
async def delete_planet(planet_id: PlanetId, service: PlanetServiceDep) -> Response:
    """Delete a planet."""
    await service.delete_planet(planet_id)
    return Response(status_code=200)
