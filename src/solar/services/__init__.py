"""Service layer: cache-aside planet access and rate limiting."""

from solar.services.planets import PlanetService
from solar.services.rate_limit import MAX_REQUESTS_PER_MINUTE, RateLimiter

__all__ = [
    "PlanetService",
    "RateLimiter",
    "MAX_REQUESTS_PER_MINUTE",
]
