"""SQLAlchemy ORM models for planet persistence.

Planets are stored document-style:
- name/type: plain columns for lookups and the category filter
- doc: JSONB column holding the rest of the document (radius, satellites)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from solar.core.ids import generate_object_id


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class PlanetTable(Base):
    """Planet table."""

    __tablename__ = "planets"

    # ObjectId-style identifier, assigned on insert and never reused
    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=generate_object_id)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    # PlanetType value
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    # mean_radius and satellites
    doc: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
