"""Domain errors raised by the service layer.

HTTP translation lives in solar.api.errors; nothing here knows about status
codes.
"""

from __future__ import annotations


class SolarError(Exception):
    """Base class for all service-layer failures."""

    kind = "InternalError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(SolarError):
    """Record or image is absent in the primary store."""

    kind = "NotFound"


class PrimaryStoreUnavailableError(SolarError):
    """The primary (document) store could not be reached or failed."""

    kind = "PrimaryStoreUnavailable"


class CacheStoreUnavailableError(SolarError):
    """Redis failed: cache, rate-limit counters and pub/sub alike."""

    kind = "CacheStoreUnavailable"


class InternalProtocolError(SolarError):
    """A store returned data that could not be interpreted."""

    kind = "InternalProtocol"


class ThrottledError(SolarError):
    """The client exceeded its request budget for the current window.

    This is an expected outcome rather than a fault; it carries both counts
    so the response can say exactly how far over the limit the client is.
    """

    kind = "TooManyRequests"

    def __init__(self, actual: int, permitted: int) -> None:
        self.actual = actual
        self.permitted = permitted
        super().__init__(
            f"Actual requests count: {actual}. Permitted requests count: {permitted}"
        )
