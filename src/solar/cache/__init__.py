"""Cache layer for the planet catalog.

Provides Redis caching with the cache-aside pattern:
- Planet records and images cached with a short TTL
- Write paths invalidate instead of refreshing
- The same Redis instance carries rate-limit counters and creation events
"""

from solar.cache.keys import CacheKeys
from solar.cache.redis import DEFAULT_TTL, RedisCache, create_redis

__all__ = [
    "CacheKeys",
    "DEFAULT_TTL",
    "RedisCache",
    "create_redis",
]
