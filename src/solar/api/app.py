"""FastAPI application factory for the planet catalog.

Creates the application with:
- Planet read endpoints (always) and write endpoints (ENABLE_WRITING_HANDLERS)
- Server-sent events stream of created planets
- Lifecycle management for database, Redis and the event fan-out
- Prometheus metrics and structured logging
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from solar import __version__
from solar.api.errors import generic_exception_handler, solar_exception_handler
from solar.api.middleware import CorrelationMiddleware
from solar.api.routers import events, health, planets
from solar.api.routers import metrics as metrics_router
from solar.cache import RedisCache, create_redis
from solar.config import Settings, settings
from solar.core.errors import SolarError
from solar.events import (
    Broadcaster,
    ChangeNotifier,
    DedicatedSubscription,
    PlanetEventListener,
)
from solar.observability import MetricsMiddleware, MetricsRegistry, configure_logging
from solar.persistence import (
    PlanetRepository,
    create_engine,
    create_session_factory,
    init_db,
)
from solar.services import PlanetService, RateLimiter
from solar.storage import LocalImageStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Create the database engine (and tables, if INIT_DB)
    - Connect to Redis
    - Build the services and store them on app.state
    - Start the broadcaster and its Redis listener (shared mode)

    On shutdown:
    - Stop the listener and broadcaster
    - Close Redis and database connections
    """
    config: Settings = app.state.settings
    state = app.state

    # Configure structured logging (JSON in production, console in dev)
    configure_logging(
        json_format=config.env != "dev",
        level=config.log_level,
    )

    logger.info(f"Starting {config.app_name} ({config.env})")
    engine = create_engine(config)
    state.session_factory = create_session_factory(engine)
    if config.init_db:
        await init_db(engine)

    redis_client = create_redis(config.redis_url, socket_timeout=config.redis_socket_timeout)
    state.cache = RedisCache(redis_client, ttl=config.cache_ttl)

    state.planet_service = PlanetService(
        repository=PlanetRepository(state.session_factory),
        images=LocalImageStorage(config.images_path),
        cache=state.cache,
        notifier=ChangeNotifier(state.cache, config.events_channel),
        ttl=config.cache_ttl,
        publish_failure_policy=config.publish_failure_policy,
        metrics=state.metrics,
    )
    state.rate_limiter = RateLimiter(
        state.cache,
        max_requests=config.rate_limit_requests,
    )

    listener: PlanetEventListener | None = None
    state.broadcaster = Broadcaster(
        heartbeat_interval=config.heartbeat_interval,
        queue_size=config.client_queue_size,
        metrics=state.metrics,
    )
    if config.broadcast_mode == "dedicated":
        state.dedicated_subscription = DedicatedSubscription(redis_client, config.events_channel)
    else:
        listener = PlanetEventListener(redis_client, state.broadcaster, config.events_channel)
        await listener.start()
        await state.broadcaster.start()

    logger.info(f"{config.app_name} startup complete (broadcast mode: {config.broadcast_mode})")

    yield

    # Shutdown
    logger.info(f"Shutting down {config.app_name}")
    if listener is not None:
        await listener.stop()
    await state.broadcaster.stop()
    await redis_client.aclose()
    await engine.dispose()
    logger.info(f"{config.app_name} shutdown complete")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Services are attached to ``app.state`` by the lifespan; tests that skip
    the lifespan may attach their own.
    """
    config = app_settings or settings

    app = FastAPI(
        title="Solar System Info",
        description="Planet catalog with cache-aside reads and live creation events",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.metrics = MetricsRegistry(enabled=config.enable_metrics)

    # CorrelationMiddleware is innermost to set context for all other middleware
    app.add_middleware(CorrelationMiddleware)
    if config.enable_metrics:
        app.add_middleware(MetricsMiddleware, metrics=app.state.metrics)

    # Register exception handlers
    app.add_exception_handler(SolarError, cast(ExceptionHandler, solar_exception_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    # Include routers
    app.include_router(health.router)
    if config.enable_metrics:
        app.include_router(metrics_router.router)

    app.include_router(planets.router)
    if config.enable_writing_handlers:
        app.include_router(planets.write_router)
        logger.info("Planet write endpoints enabled")

    app.include_router(events.router)

    return app
