"""Redis cache store client.

Provides async Redis operations for the cache-aside repository, the rate
limiter and the change notifier. Uses the redis-py async client for
connection pooling.

Every multi-step coordination (set+expire, incr+expire) runs in a single
MULTI/EXEC pipeline; none of them is approximated with separate calls.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from solar.core.errors import CacheStoreUnavailableError

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Default TTL (1 minute)
DEFAULT_TTL = 60


def create_redis(url: str, socket_timeout: float | None = None) -> Redis:
    """Create a pooled Redis client.

    Values are stored as bytes; callers decode where they need text.
    """
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        decode_responses=False,
        socket_timeout=socket_timeout,
    )


class RedisCache:
    """Cache store operations.

    All Redis failures are raised as CacheStoreUnavailableError.
    """

    def __init__(self, client: Redis, ttl: int = DEFAULT_TTL):
        self.client = client
        self.ttl = ttl

    async def get(self, key: str) -> bytes | None:
        """Get a cached value or None on miss."""
        try:
            value = await self.client.get(key)
        except RedisError as exc:
            raise CacheStoreUnavailableError(f"Redis GET {key} failed: {exc}") from exc
        return cast(bytes | None, value)

    async def set_with_ttl(self, key: str, value: bytes, ttl: int | None = None) -> None:
        """Set a value and its expiry in one atomic pipeline."""
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.set(key, value)
                pipe.expire(key, self.ttl if ttl is None else ttl)
                await pipe.execute()
        except RedisError as exc:
            raise CacheStoreUnavailableError(f"Redis SET {key} failed: {exc}") from exc

    async def delete(self, *keys: str) -> None:
        """Delete cached values; absent keys are ignored."""
        try:
            await self.client.delete(*keys)
        except RedisError as exc:
            raise CacheStoreUnavailableError(f"Redis DEL {' '.join(keys)} failed: {exc}") from exc

    async def incr_with_ttl(self, key: str, ttl: int) -> int:
        """Increment a counter and (re)set its expiry atomically.

        Returns:
            The counter value after the increment.
        """
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(key, 1)
                pipe.expire(key, ttl)
                count, _ = await pipe.execute()
        except RedisError as exc:
            raise CacheStoreUnavailableError(f"Redis INCR {key} failed: {exc}") from exc
        return int(count)

    async def publish(self, channel: str, message: str | bytes) -> int:
        """Publish a message on a pub/sub channel.

        Returns the number of subscribers that received it.
        """
        try:
            count = await self.client.publish(channel, message)
        except RedisError as exc:
            raise CacheStoreUnavailableError(
                f"Redis PUBLISH {channel} failed: {exc}"
            ) from exc
        logger.debug(f"Published to {channel} ({count} subscribers)")
        return int(count)

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except Exception:
            return False
