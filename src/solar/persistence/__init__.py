"""Persistence layer for the planet catalog.

This module provides:
- Async PostgreSQL engine and session factory
- SQLAlchemy ORM model storing planets document-style in JSONB
- Repository with NotFound/StoreUnavailable error translation
"""

from solar.persistence.db import (
    create_engine,
    create_session_factory,
    health_check,
    init_db,
    session_context,
)
from solar.persistence.repositories import PlanetRepository
from solar.persistence.tables import Base, PlanetTable

__all__ = [
    # DB
    "create_engine",
    "create_session_factory",
    "session_context",
    "init_db",
    "health_check",
    # Tables
    "Base",
    "PlanetTable",
    # Repositories
    "PlanetRepository",
]
