"""Shared FastAPI dependencies.

Services are built once by the application lifespan and stored on
``app.state``; handlers receive them through these dependencies instead of
module-level singletons.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request

from solar.core.errors import InternalProtocolError
from solar.events.broadcaster import Broadcaster
from solar.events.dedicated import DedicatedSubscription
from solar.services.planets import PlanetService
from solar.services.rate_limit import RateLimiter


def get_planet_service(request: Request) -> PlanetService:
    return request.app.state.planet_service  # type: ignore[no-any-return]


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter  # type: ignore[no-any-return]


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster  # type: ignore[no-any-return]


def get_dedicated_subscription(request: Request) -> DedicatedSubscription:
    return request.app.state.dedicated_subscription  # type: ignore[no-any-return]


def get_client_address(request: Request) -> str:
    """Peer address of the connection."""
    if request.client is None:
        raise InternalProtocolError("Can't determine the client address")
    return request.client.host


async def enforce_rate_limit(
    client_address: Annotated[str, Depends(get_client_address)],
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    """Admit the request or raise ThrottledError.

    Redis failures propagate, so an unreachable limiter rejects the request.
    """
    await rate_limiter.admit(client_address)


async def open_event_stream(request: Request) -> AsyncIterator[str]:
    """Open a frame stream for one client in the configured broadcast mode."""
    if request.app.state.settings.broadcast_mode == "dedicated":
        return await get_dedicated_subscription(request).open()

    client = await get_broadcaster(request).subscribe()
    return client.frames()


PlanetServiceDep = Annotated[PlanetService, Depends(get_planet_service)]
EventStreamDep = Annotated[AsyncIterator[str], Depends(open_event_stream)]
