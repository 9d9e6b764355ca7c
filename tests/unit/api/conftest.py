"""Fixtures for API tests.

The application is created without running its lifespan; services are
attached to ``app.state`` directly.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from solar.api.app import create_app
from solar.cache.redis import RedisCache
from solar.config import Settings, settings
from solar.events.broadcaster import Broadcaster
from solar.services.planets import PlanetService
from solar.services.rate_limit import RateLimiter


def _frozen_clock() -> datetime:
    return datetime(2024, 3, 1, 12, 5, tzinfo=UTC)


@pytest.fixture
def app_settings() -> Settings:
    return settings.model_copy(update={"enable_writing_handlers": True, "env": "test"})


@pytest.fixture
def app(app_settings: Settings, planet_service: PlanetService, cache: RedisCache) -> FastAPI:
    app = create_app(app_settings)
    app.state.cache = cache
    app.state.planet_service = planet_service
    app.state.rate_limiter = RateLimiter(cache, clock=_frozen_clock)
    app.state.broadcaster = Broadcaster()
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
