"""Tiered geocoding service.

This module provides the geocoding pipeline used by the resolver:
- Sanitizes free-text addresses
- Enforces per-caller rate limiting
- Serves repeated lookups from a bounded TTL cache
- Tries the primary provider (Google, only with an API key), then the
  secondary provider (Nominatim), then a curated manual table
- Revalidates every tier's coordinates before accepting them
"""

import re
import time
from typing import Callable, Optional, Protocol

from geopy.exc import GeocoderServiceError
from pydantic import BaseModel

from georesolver.core.config import settings
from georesolver.core.errors import (
    AllProvidersFailedError,
    GeoResolverError,
    InvalidInputError,
    ProviderError,
    RateLimitedError,
)
from georesolver.core.geocoding.cache import GeocodeCache
from georesolver.core.geocoding.constants import (
    MANUAL_COORDINATES,
    MIN_ADDRESS_LENGTH,
    SAFE_ADDRESS_CHARS,
    UNSAFE_ADDRESS_CHARS,
)
from georesolver.core.geocoding.executor import ResilientExecutor, RetryingExecutor
from georesolver.core.geocoding.providers import GoogleGeocoder, NominatimGeocoder
from georesolver.core.geocoding.rate_limit import SlidingWindowRateLimiter
from georesolver.core.geocoding.validator import CoordinateLike, CoordinateValidator
from georesolver.core.logging import get_logger, redact_address
from georesolver.core.metrics import GEOCODE_ERRORS, GEOCODE_LATENCY, GEOCODE_REQUESTS
from georesolver.models.geographic import (
    Coordinates,
    GeocodeResult,
    ReverseGeocodeResult,
)

logger = get_logger(__name__, module="geocoding_service")

DEFAULT_CLIENT_ID = "default"


class GeocodingProvider(Protocol):
    name: str

    async def geocode(self, address: str) -> GeocodeResult: ...

    async def reverse(self, coordinates: Coordinates) -> ReverseGeocodeResult: ...


class GeocodingStats(BaseModel):
    total_requests: int = 0
    cache_hits: int = 0
    google_requests: int = 0
    nominatim_requests: int = 0
    manual_requests: int = 0
    errors: int = 0
    average_response_time: float = 0.0  # milliseconds


class GeocodingService:
    """Geocoding with caching, rate limiting and multi-tier fallback."""

    def __init__(
        self,
        executor: Optional[ResilientExecutor] = None,
        primary: Optional[GeocodingProvider] = None,
        secondary: Optional[GeocodingProvider] = None,
        api_key: Optional[str] = None,
        cache: Optional[GeocodeCache] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        validator: Optional[CoordinateValidator] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the geocoding service.

        Args:
            executor: Resilient executor wrapping every provider call
            primary: Primary provider; built from the API key when omitted
            secondary: Secondary provider; Nominatim when omitted
            api_key: Google key, defaults to ``GOOGLE_GEOCODING_API_KEY``
            cache: Geocode cache, built from settings when omitted
            rate_limiter: Per-caller limiter, built from settings when omitted
            validator: Coordinate validator used to revalidate tier output
            clock: Time source for the default cache and limiter
        """
        self.executor: ResilientExecutor = (
            executor if executor is not None else RetryingExecutor()
        )
        self.validator = validator if validator is not None else CoordinateValidator()
        self.max_address_length = settings.GEOCODING_MAX_ADDRESS_LENGTH

        self.api_key = api_key if api_key is not None else settings.GOOGLE_GEOCODING_API_KEY
        if primary is None and self.api_key:
            primary = GoogleGeocoder(
                api_key=self.api_key,
                timeout=settings.GEOCODING_PRIMARY_TIMEOUT,
                domain=settings.GOOGLE_GEOCODING_DOMAIN,
            )
        elif primary is None:
            logger.info("No Google Geocoding API key configured, primary tier disabled")
        self.primary: Optional[GeocodingProvider] = primary

        if secondary is None:
            secondary = NominatimGeocoder(
                user_agent=settings.NOMINATIM_USER_AGENT,
                timeout=settings.GEOCODING_SECONDARY_TIMEOUT,
                domain=settings.NOMINATIM_DOMAIN,
            )
        self.secondary: GeocodingProvider = secondary

        # An empty cache is falsy, so test against None
        if cache is None:
            cache = GeocodeCache(
                ttl_seconds=settings.GEOCODING_CACHE_TTL,
                max_size=settings.GEOCODING_CACHE_MAX_SIZE,
                clock=clock,
            )
        self.cache = cache
        if rate_limiter is None:
            rate_limiter = SlidingWindowRateLimiter(
                max_requests=settings.GEOCODING_RATE_LIMIT_MAX_REQUESTS,
                window_seconds=settings.GEOCODING_RATE_LIMIT_WINDOW,
                clock=clock,
            )
        self.rate_limiter = rate_limiter
        self.stats = GeocodingStats()

    def sanitize_address(self, address: str) -> str:
        """Trim, cap and strip an address down to a safe character set.

        Raises:
            InvalidInputError: If nothing usable is left
        """
        if not isinstance(address, str):
            raise InvalidInputError("Address must be a string")

        sanitized = address.strip()[: self.max_address_length]
        sanitized = re.sub(UNSAFE_ADDRESS_CHARS, "", sanitized)
        sanitized = re.sub(r"\s+", " ", sanitized)
        sanitized = re.sub(SAFE_ADDRESS_CHARS, "", sanitized).strip()

        if len(sanitized) < MIN_ADDRESS_LENGTH:
            raise InvalidInputError(
                "Address too short or contains only invalid characters"
            )
        return sanitized

    def _accept(self, result: GeocodeResult, tier: str) -> GeocodeResult:
        """Revalidate a tier's coordinates and normalize them."""
        validation = self.validator.validate(result.coordinates)
        if not validation.valid:
            raise ProviderError(
                tier, "invalid", f"Invalid coordinates from {tier}: {validation.error}"
            )
        return result.model_copy(
            update={"coordinates": self.validator.normalize(result.coordinates)}
        )

    async def _geocode_with_provider(
        self, provider: GeocodingProvider, address: str
    ) -> GeocodeResult:
        result = await self.executor.execute(lambda: provider.geocode(address))
        return self._accept(result, provider.name)

    def _geocode_with_manual(self, address: str) -> Optional[GeocodeResult]:
        """Exact lookup, then substring match, in the curated table."""
        key = address.lower().strip()

        result = MANUAL_COORDINATES.get(key)
        if result is None:
            for name, candidate in MANUAL_COORDINATES.items():
                if name in key or key in name:
                    result = candidate
                    break

        if result is None:
            return None
        return self._accept(result, "manual")

    async def geocode(
        self, address: str, client_id: str = DEFAULT_CLIENT_ID
    ) -> GeocodeResult:
        """Resolve an address to coordinates.

        Args:
            address: Free-text address or place name
            client_id: Caller identity used for rate limiting

        Returns:
            GeocodeResult from the first tier that produced valid coordinates

        Raises:
            InvalidInputError: Address empty or unusable after sanitizing
            RateLimitedError: Caller over quota; no cache or provider touched
            AllProvidersFailedError: Every tier failed
        """
        start = time.perf_counter()
        self.stats.total_requests += 1

        try:
            sanitized = self.sanitize_address(address)

            if not self.rate_limiter.check(client_id):
                raise RateLimitedError(client_id, self.rate_limiter.retry_after(client_id))

            cached = self.cache.get(sanitized)
            if cached is not None:
                self.stats.cache_hits += 1
                GEOCODE_REQUESTS.labels(tier="cache").inc()
                logger.debug(f"Cache hit for address: {redact_address(sanitized)}")
                return cached.result.model_copy(update={"source": "cache"})

            causes: dict[str, str] = {}

            for provider, counter in (
                (self.primary, "google_requests"),
                (self.secondary, "nominatim_requests"),
            ):
                if provider is None:
                    causes["google"] = "no API key configured"
                    continue
                try:
                    result = await self._geocode_with_provider(provider, sanitized)
                except (GeoResolverError, GeocoderServiceError) as e:
                    causes[provider.name] = str(e)
                    logger.warning(
                        f"{provider.name} geocoding failed for "
                        f"'{redact_address(sanitized)}': {e}"
                    )
                    continue
                except Exception as e:
                    causes[provider.name] = str(e)
                    logger.error(
                        f"Unexpected {provider.name} error for "
                        f"'{redact_address(sanitized)}': {e}"
                    )
                    continue

                self.cache.set(sanitized, result)
                setattr(self.stats, counter, getattr(self.stats, counter) + 1)
                GEOCODE_REQUESTS.labels(tier=provider.name).inc()
                return result

            try:
                manual = self._geocode_with_manual(sanitized)
            except ProviderError as e:
                causes["manual"] = str(e)
                manual = None
            if manual is not None:
                self.stats.manual_requests += 1
                GEOCODE_REQUESTS.labels(tier="manual").inc()
                logger.info(f"Resolved '{redact_address(sanitized)}' from manual table")
                return manual
            causes.setdefault("manual", "no match in manual table")

            raise AllProvidersFailedError(causes)

        except GeoResolverError as e:
            self.stats.errors += 1
            GEOCODE_ERRORS.labels(code=e.code).inc()
            raise
        finally:
            self._update_stats(start)

    async def reverse_geocode(self, coordinates: CoordinateLike) -> ReverseGeocodeResult:
        """Resolve coordinates to an address (primary, then secondary).

        Raises:
            InvalidInputError: Coordinates fail validation
            AllProvidersFailedError: Both providers failed
        """
        validation = self.validator.validate(coordinates)
        if not validation.valid:
            raise InvalidInputError(f"Invalid coordinates: {validation.error}")
        point = self.validator.normalize(coordinates)

        causes: dict[str, str] = {}
        for provider in (self.primary, self.secondary):
            if provider is None:
                continue
            try:
                return await self.executor.execute(lambda p=provider: p.reverse(point))
            except (GeoResolverError, GeocoderServiceError) as e:
                causes[provider.name] = str(e)
                logger.warning(f"{provider.name} reverse geocoding failed: {e}")
            except Exception as e:
                causes[provider.name] = str(e)
                logger.error(f"Unexpected {provider.name} reverse geocoding error: {e}")

        GEOCODE_ERRORS.labels(code=AllProvidersFailedError.code).inc()
        raise AllProvidersFailedError(causes)

    def _update_stats(self, start: float) -> None:
        duration = time.perf_counter() - start
        GEOCODE_LATENCY.observe(duration)
        total = self.stats.total_requests
        self.stats.average_response_time = (
            self.stats.average_response_time * (total - 1) + duration * 1000
        ) / total

    def get_stats(self) -> GeocodingStats:
        return self.stats.model_copy()

    def get_cache_stats(self) -> dict[str, float]:
        total = self.stats.total_requests
        return {
            "size": len(self.cache),
            "hit_rate": self.stats.cache_hits / total if total > 0 else 0.0,
            "max_size": self.cache.max_size,
        }

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Geocoding cache cleared")

