"""Geocoding for the resolver.

This package provides:
- Coordinate validation and normalization
- Tiered geocoding service with caching and rate limiting
- Google and Nominatim provider clients
- Pluggable resilient executors for provider calls
"""

from georesolver.core.geocoding.cache import GeocodeCache
from georesolver.core.geocoding.executor import (
    DirectExecutor,
    ResilientExecutor,
    RetryingExecutor,
)
from georesolver.core.geocoding.providers import GoogleGeocoder, NominatimGeocoder
from georesolver.core.geocoding.rate_limit import SlidingWindowRateLimiter
from georesolver.core.geocoding.service import (
    GeocodingService,
    GeocodingStats,
)
from georesolver.core.geocoding.validator import CoordinateValidator

__all__ = [
    "CoordinateValidator",
    "DirectExecutor",
    "GeocodeCache",
    "GeocodingService",
    "GeocodingStats",
    "GoogleGeocoder",
    "NominatimGeocoder",
    "ResilientExecutor",
    "RetryingExecutor",
    "SlidingWindowRateLimiter",
]
