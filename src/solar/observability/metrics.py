"""Prometheus metrics.

Provides:
- HTTP request count and response time per registered route
- Connected event stream clients
- Cache hits and misses

Each application builds its own MetricsRegistry (with its own
CollectorRegistry) and passes it to the components that record into it.

Usage:
    metrics = MetricsRegistry(enabled=True)
    metrics.cache_hits_total.labels(cache_type="planet").inc()
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

HTTP_RESPONSE_TIME_BUCKETS = (
    0.0005,
    0.0008,
    0.00085,
    0.0009,
    0.00095,
    0.001,
    0.00105,
    0.0011,
    0.00115,
    0.0012,
    0.0015,
    0.002,
    0.003,
    1.0,
)


class NoOpMetric:
    """No-op metric for when metrics are disabled."""

    def labels(self, **kwargs: Any) -> "NoOpMetric":
        """Return self for chaining."""
        return self

    def inc(self, amount: float = 1) -> None:
        pass

    def set(self, value: float) -> None:
        pass

    def observe(self, value: float) -> None:
        pass


class MetricsRegistry:
    """Holds the application's Prometheus metrics."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.registry: CollectorRegistry | None = None

        if not enabled:
            logger.info("Metrics are disabled")
            noop = NoOpMetric()
            self.http_requests_total: Any = noop
            self.http_response_time_seconds: Any = noop
            self.connected_sse_clients: Any = noop
            self.cache_hits_total: Any = noop
            self.cache_misses_total: Any = noop
            return

        self.registry = CollectorRegistry()

        self.http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests total",
            ["method", "path"],
            registry=self.registry,
        )
        self.http_response_time_seconds = Histogram(
            "http_response_time_seconds",
            "HTTP response times",
            ["method", "path"],
            buckets=HTTP_RESPONSE_TIME_BUCKETS,
            registry=self.registry,
        )
        self.connected_sse_clients = Gauge(
            "http_connected_sse_clients",
            "Connected SSE clients",
            registry=self.registry,
        )
        self.cache_hits_total = Counter(
            "cache_hits_total",
            "Cache hits",
            ["cache_type"],
            registry=self.registry,
        )
        self.cache_misses_total = Counter(
            "cache_misses_total",
            "Cache misses",
            ["cache_type"],
            registry=self.registry,
        )

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self.registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self.registry)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and response time.

    Only requests matched to a registered route are recorded, labelled with
    the route template. Flooding unregistered paths therefore cannot grow
    the number of time series.
    """

    def __init__(self, app: ASGIApp, metrics: MetricsRegistry) -> None:
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        start_time = time.perf_counter()
        response: Response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = request.scope.get("route")
        path = getattr(route, "path", None)
        if path is None or path == "/metrics":
            return response

        self.metrics.http_requests_total.labels(method=request.method, path=path).inc()
        self.metrics.http_response_time_seconds.labels(
            method=request.method, path=path
        ).observe(duration)
        return response
