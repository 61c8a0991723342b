"""Prometheus metrics for coordinate resolution."""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram


def _find_collector(name: str):
    for collector in list(REGISTRY._collector_to_names.keys()):
        if getattr(collector, "_name", None) == name:
            return collector
    return None


def get_or_create_counter(name: str, description: str, labels=None):
    """Get existing counter from registry or create new one."""
    existing = _find_collector(name)
    if existing is not None:
        return existing
    if labels:
        return Counter(name, description, labels)
    return Counter(name, description)


def get_or_create_gauge(name: str, description: str):
    """Get existing gauge from registry or create new one."""
    existing = _find_collector(name)
    if existing is not None:
        return existing
    return Gauge(name, description)


def get_or_create_histogram(name: str, description: str, buckets=None):
    """Get existing histogram from registry or create new one."""
    existing = _find_collector(name)
    if existing is not None:
        return existing
    if buckets:
        return Histogram(name, description, buckets=buckets)
    return Histogram(name, description)


GEOCODE_REQUESTS = get_or_create_counter(
    "georesolver_geocode_requests",
    "Geocode requests answered, by tier",
    ["tier"],
)

GEOCODE_ERRORS = get_or_create_counter(
    "georesolver_geocode_errors",
    "Geocode requests that failed, by error code",
    ["code"],
)

GEOCODE_LATENCY = get_or_create_histogram(
    "georesolver_geocode_seconds",
    "Time spent resolving an address",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

VERIFIED_DESTINATIONS = get_or_create_gauge(
    "georesolver_verified_destinations",
    "Number of destinations in the verified registry",
)
