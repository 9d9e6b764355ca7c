"""Observability: structured logging and Prometheus metrics."""

from solar.observability.logging import (
    configure_logging,
    correlation_id_var,
    request_id_var,
)
from solar.observability.metrics import MetricsMiddleware, MetricsRegistry

__all__ = [
    # Logging
    "configure_logging",
    "request_id_var",
    "correlation_id_var",
    # Metrics
    "MetricsRegistry",
    "MetricsMiddleware",
]
