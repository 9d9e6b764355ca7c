"""Change notifier for created planets.

Publishes a compact PlanetMessage on the Redis events channel. Every process
running a PlanetEventListener (or a dedicated per-client subscription)
receives it, which gives multi-instance delivery without sharing an
in-memory registry between processes.
"""

from __future__ import annotations

import logging

from solar.cache.redis import RedisCache
from solar.core.model import Planet, PlanetMessage

logger = logging.getLogger(__name__)

# Pub/Sub channel name
NEW_PLANETS_CHANNEL = "new_planets"


class ChangeNotifier:
    """Publishes planet creation events."""

    def __init__(self, cache: RedisCache, channel: str = NEW_PLANETS_CHANNEL):
        self.cache = cache
        self.channel = channel

    async def publish(self, planet: Planet) -> int:
        """Publish a creation event for a stored planet.

        Returns the number of subscribers that received it; zero is not an
        error.

        Raises:
            InternalProtocolError: If the planet has no id.
            CacheStoreUnavailableError: If Redis rejects the publish.
        """
        message = PlanetMessage.from_planet(planet)
        count = await self.cache.publish(self.channel, message.to_json())
        logger.debug(f"Announced planet {message.id} to {count} subscribers")
        return count
