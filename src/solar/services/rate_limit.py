"""Fixed-window rate limiting on Redis.

Each client gets one counter per wall-clock minute:
    rate:{client_address}:{minute of the hour}

The counter is incremented and its TTL (re)set in one MULTI/EXEC pipeline.
Windows are aligned to the clock, not sliding, so a client can issue up to
twice the limit across a minute boundary.
Each counter expires after one 60 s window.

The limiter fails closed: when Redis is unreachable, admit() raises and the
request is rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from solar.cache.keys import CacheKeys
from solar.cache.redis import RedisCache
from solar.core.errors import ThrottledError

logger = logging.getLogger(__name__)

MAX_REQUESTS_PER_MINUTE = 10
WINDOW_SECONDS = 60


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RateLimiter:
    """Per-client fixed-window request counter."""

    def __init__(
        self,
        cache: RedisCache,
        max_requests: int = MAX_REQUESTS_PER_MINUTE,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.cache = cache
        self.max_requests = max_requests
        self.clock = clock

    def window_key(self, client_address: str) -> str:
        return CacheKeys.rate_limit(client_address, self.clock().minute)

    async def admit(self, client_address: str) -> int:
        """Count a request and check it against the limit.

        Returns:
            The client's request count in the current window.

        Raises:
            ThrottledError: If the count exceeds the limit.
            CacheStoreUnavailableError: If Redis cannot be reached.
        """
        key = self.window_key(client_address)
        count = await self.cache.incr_with_ttl(key, WINDOW_SECONDS)

        if count > self.max_requests:
            logger.info(
                f"Throttled {client_address}: {count} requests, {self.max_requests} permitted"
            )
            raise ThrottledError(actual=count, permitted=self.max_requests)

        return count
