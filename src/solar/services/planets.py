"""Cache-aside planet service.

Reads consult Redis first and fall back to the primary store on a miss,
populating the cache with a 60 second TTL. Writes go to the primary store
and then invalidate the cached projection instead of refreshing it; the
next read repopulates lazily.

Concurrent misses on the same key are not coalesced: each loads from the
primary store and writes the cache, and the last write wins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from solar.cache.keys import CacheKeys
from solar.cache.redis import DEFAULT_TTL, RedisCache
from solar.core.errors import CacheStoreUnavailableError, InternalProtocolError
from solar.core.model import Planet, PlanetType
from solar.events.notifier import ChangeNotifier
from solar.persistence.repositories import PlanetRepository
from solar.storage.images import LocalImageStorage

if TYPE_CHECKING:
    from solar.observability.metrics import MetricsRegistry

logger = logging.getLogger(__name__)

PublishFailurePolicy = Literal["propagate", "log"]


class PlanetService:
    """Read/write service layer for planets.

    ``publish_failure_policy`` decides what a failed creation event does to
    the create call. ``"propagate"`` fails the call even though the planet is
    already stored; ``"log"`` keeps the call successful and only logs. Either
    way create is not atomic across persistence and notification.
    """

    def __init__(
        self,
        repository: PlanetRepository,
        images: LocalImageStorage,
        cache: RedisCache,
        notifier: ChangeNotifier,
        ttl: int = DEFAULT_TTL,
        publish_failure_policy: PublishFailurePolicy = "propagate",
        metrics: MetricsRegistry | None = None,
    ):
        self.repository = repository
        self.images = images
        self.cache = cache
        self.notifier = notifier
        self.ttl = ttl
        self.publish_failure_policy = publish_failure_policy
        self.metrics = metrics

    async def list_planets(self, planet_type: PlanetType | None = None) -> list[Planet]:
        return await self.repository.list_all(planet_type)

    async def get_planet(self, planet_id: str) -> Planet:
        """Get a planet, from cache when possible.

        Raises:
            NotFoundError: If the planet does not exist.
            CacheStoreUnavailableError: If the cache lookup fails.
            InternalProtocolError: If the cached value is malformed.
        """
        cache_key = CacheKeys.planet(planet_id)

        cached_planet = await self.cache.get(cache_key)
        if cached_planet is not None:
            logger.debug(f"Use cache to retrieve a planet by id: {planet_id}")
            self._record_cache_access("planet", hit=True)
            return Planet.from_bytes(cached_planet)

        logger.debug(f"Use database to retrieve a planet by id: {planet_id}")
        self._record_cache_access("planet", hit=False)
        planet = await self.repository.get(planet_id)

        await self._populate(cache_key, planet.to_bytes())
        return planet

    async def create_planet(self, planet: Planet) -> Planet:
        """Store a planet and announce it to live subscribers.

        Any id on the input is discarded; the primary store assigns one.
        """
        created = await self.repository.create(planet.without_id())

        try:
            await self.notifier.publish(created)
        except (CacheStoreUnavailableError, InternalProtocolError) as e:
            if self.publish_failure_policy == "propagate":
                logger.error(f"Planet {created.id} stored but its creation event failed: {e}")
                raise
            logger.warning(f"Planet {created.id} stored, creation event dropped: {e}")

        return created

    async def update_planet(self, planet_id: str, planet: Planet) -> Planet:
        """Write through to the primary store and invalidate cached entries."""
        updated = await self.repository.update(planet_id, planet)

        # A renamed planet resolves to a different image, so both go.
        await self.cache.delete(CacheKeys.planet(planet_id), CacheKeys.planet_image(planet_id))

        return updated

    async def delete_planet(self, planet_id: str) -> None:
        """Delete from the primary store and invalidate cached entries."""
        await self.repository.delete(planet_id)

        await self.cache.delete(CacheKeys.planet(planet_id), CacheKeys.planet_image(planet_id))

    async def get_planet_image(self, planet_id: str) -> bytes:
        """Get a planet's image, from cache when possible.

        On a miss the planet is resolved from the primary store and its image
        is loaded by the planet's lowercase name.
        """
        cache_key = CacheKeys.planet_image(planet_id)

        cached_image = await self.cache.get(cache_key)
        if cached_image is not None:
            logger.debug(f"Use cache to retrieve an image of a planet by id: {planet_id}")
            self._record_cache_access("image", hit=True)
            return cached_image

        logger.debug(f"Use database to retrieve an image of a planet by id: {planet_id}")
        self._record_cache_access("image", hit=False)
        planet = await self.repository.get(planet_id)
        image = await self.images.retrieve(planet.name)

        await self._populate(cache_key, image)
        return image

    async def _populate(self, cache_key: str, value: bytes) -> None:
        """Best-effort cache write; the caller already holds a valid value."""
        try:
            await self.cache.set_with_ttl(cache_key, value, self.ttl)
        except CacheStoreUnavailableError as e:
            logger.warning(f"Failed to populate cache key {cache_key}: {e}")

    def _record_cache_access(self, cache_type: str, hit: bool) -> None:
        if self.metrics is None:
            return
        if hit:
            self.metrics.cache_hits_total.labels(cache_type=cache_type).inc()
        else:
            self.metrics.cache_misses_total.labels(cache_type=cache_type).inc()
