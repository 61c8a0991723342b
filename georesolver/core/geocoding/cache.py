"""In-process geocoding cache.

Entries expire after a TTL. When the cache is full the oldest ~10% of
entries by insertion timestamp are dropped before the new entry goes in;
hit counts are tracked for statistics only and never affect eviction.
"""

import math
import time
from typing import Callable, Optional

from georesolver.core.geocoding.constants import CACHE_EVICTION_FRACTION
from georesolver.core.logging import get_logger, redact_address
from georesolver.models.geographic import CachedEntry, GeocodeResult

logger = get_logger(__name__, module="geocode_cache")


class GeocodeCache:
    """TTL cache keyed by lower-cased address."""

    def __init__(
        self,
        ttl_seconds: float,
        max_size: int,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Age after which an entry is stale
            max_size: Number of entries that triggers eviction
            clock: Time source in seconds, overridable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CachedEntry] = {}

    @staticmethod
    def _get_cache_key(address: str) -> str:
        return address.lower()

    def get(self, address: str) -> Optional[CachedEntry]:
        """Return a fresh entry (bumping its hit count) or None."""
        key = self._get_cache_key(address)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.timestamp > self.ttl_seconds:
            del self._entries[key]
            logger.debug(f"Evicted stale cache entry for: {redact_address(address)}")
            return None

        entry.hits += 1
        return entry

    def set(self, address: str, result: GeocodeResult) -> None:
        key = self._get_cache_key(address)

        if len(self._entries) >= self.max_size:
            self._evict_oldest()

        self._entries[key] = CachedEntry(result=result, timestamp=self._clock(), hits=0)

    def _evict_oldest(self) -> None:
        count = max(1, math.floor(self.max_size * CACHE_EVICTION_FRACTION))
        oldest = sorted(self._entries.items(), key=lambda item: item[1].timestamp)
        for key, _ in oldest[:count]:
            del self._entries[key]
        logger.debug(f"Cache full, evicted {min(count, len(oldest))} oldest entries")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: str) -> bool:
        return self._get_cache_key(address) in self._entries
