"""Per-client event subscription.

Alternative to the shared Broadcaster: every streaming client opens its own
Redis pub/sub subscription. There is no registry, no lock and no heartbeat
sweep; the subscription is torn down as soon as the response stream closes.
The cost is one Redis connection per connected client.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from solar.core.errors import CacheStoreUnavailableError
from solar.events.frames import CONNECTED_FRAME, decode_payload, planet_created_frame
from solar.events.notifier import NEW_PLANETS_CHANNEL

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)


class DedicatedSubscription:
    """Opens one pub/sub subscription per streaming client."""

    def __init__(self, client: Redis, channel: str = NEW_PLANETS_CHANNEL):
        self.client = client
        self.channel = channel

    async def open(self) -> AsyncIterator[str]:
        """Subscribe and return the client's frame stream.

        The subscription is established before returning so a Redis outage
        fails the request instead of an already-started stream.

        Raises:
            CacheStoreUnavailableError: If the subscription cannot be opened.
        """
        pubsub = self.client.pubsub()
        try:
            await pubsub.subscribe(self.channel)
        except RedisError as exc:
            await pubsub.aclose()
            raise CacheStoreUnavailableError(
                f"Can't subscribe to channel {self.channel}: {exc}"
            ) from exc

        return self._frames(pubsub)

    async def _frames(self, pubsub: PubSub) -> AsyncIterator[str]:
        try:
            yield CONNECTED_FRAME
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                yield planet_created_frame(decode_payload(message["data"]))
        finally:
            try:
                await pubsub.unsubscribe(self.channel)
            except RedisError as e:
                logger.debug(f"Failed to unsubscribe dedicated stream: {e}")
            await pubsub.aclose()
