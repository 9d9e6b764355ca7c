"""Middleware for the planet catalog API."""

from solar.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
