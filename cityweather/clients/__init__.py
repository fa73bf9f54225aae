"""Weather API clients."""

from .noaa_cdo import (
    ApiError,
    ConfigurationError,
    NoaaCdoClient,
    NoaaCdoError,
    RateLimitError,
    TransportError,
)

__all__ = [
    "ApiError",
    "ConfigurationError",
    "NoaaCdoClient",
    "NoaaCdoError",
    "RateLimitError",
    "TransportError",
]
