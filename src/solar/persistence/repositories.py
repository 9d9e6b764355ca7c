"""Repository for planet persistence.

The primary store is authoritative: it assigns identities on creation and
every cache entry is a projection of what it returns. Missing records are
reported as NotFoundError; driver and connection failures as
PrimaryStoreUnavailableError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from solar.core.errors import NotFoundError, PrimaryStoreUnavailableError
from solar.core.ids import generate_object_id, is_valid_object_id
from solar.core.model import Planet, PlanetType
from solar.persistence.db import session_context
from solar.persistence.tables import PlanetTable

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate driver failures into PrimaryStoreUnavailableError."""
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.error(f"Primary store {operation} failed: {exc}")
        raise PrimaryStoreUnavailableError(f"Primary store {operation} failed: {exc}") from exc


def _doc_from_model(planet: Planet) -> dict[str, Any]:
    return planet.model_dump(mode="json", include={"mean_radius", "satellites"})


def _model_from_row(row: PlanetTable) -> Planet:
    return Planet.model_validate({**row.doc, "id": row.id, "name": row.name, "type": row.type})


class PlanetRepository:
    """CRUD access to planet records."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_all(self, planet_type: PlanetType | None = None) -> list[Planet]:
        """List planets, optionally filtered by category."""
        stmt = select(PlanetTable).order_by(PlanetTable.created_at, PlanetTable.id)
        if planet_type is not None:
            stmt = stmt.where(PlanetTable.type == planet_type.value)

        with _store_errors("list"):
            async with session_context(self.session_factory) as session:
                result = await session.execute(stmt)
                return [_model_from_row(row) for row in result.scalars()]

    async def create(self, planet: Planet) -> Planet:
        """Insert a planet and return it with its newly assigned id."""
        row = PlanetTable(
            id=generate_object_id(),
            name=planet.name,
            type=planet.type.value,
            doc=_doc_from_model(planet),
        )

        with _store_errors("create"):
            async with session_context(self.session_factory) as session:
                session.add(row)
                await session.flush()
                created = _model_from_row(row)

        logger.info(f"Created planet {created.id} ({created.name})")
        return created

    async def get(self, planet_id: str) -> Planet:
        """Get a planet by id.

        Raises:
            NotFoundError: If the id is malformed or no such planet exists.
        """
        if not is_valid_object_id(planet_id):
            raise NotFoundError(f"Can't find a planet by id: {planet_id}")

        with _store_errors("get"):
            async with session_context(self.session_factory) as session:
                row = await session.get(PlanetTable, planet_id)
                if row is None:
                    raise NotFoundError(f"Can't find a planet by id: {planet_id}")
                return _model_from_row(row)

    async def update(self, planet_id: str, planet: Planet) -> Planet:
        """Replace a planet's attributes, keeping its id."""
        if not is_valid_object_id(planet_id):
            raise NotFoundError(f"Can't find an updated planet by id: {planet_id}")

        with _store_errors("update"):
            async with session_context(self.session_factory) as session:
                row = await session.get(PlanetTable, planet_id)
                if row is None:
                    raise NotFoundError(f"Can't find an updated planet by id: {planet_id}")

                row.name = planet.name
                row.type = planet.type.value
                row.doc = _doc_from_model(planet)
                await session.flush()
                return _model_from_row(row)

    async def delete(self, planet_id: str) -> None:
        """Delete a planet."""
        if not is_valid_object_id(planet_id):
            raise NotFoundError(f"Can't delete a planet by id: {planet_id}")

        with _store_errors("delete"):
            async with session_context(self.session_factory) as session:
                row = await session.get(PlanetTable, planet_id)
                if row is None:
                    raise NotFoundError(f"Can't delete a planet by id: {planet_id}")
                await session.delete(row)
                await session.flush()
