"""Tests for resolver metrics."""

import pytest
from prometheus_client import REGISTRY

from georesolver.core.errors import AllProvidersFailedError, NotFoundError
from georesolver.core.geographic.manager import GeographicDataManager
from georesolver.core.metrics import (
    GEOCODE_LATENCY,
    GEOCODE_REQUESTS,
    get_or_create_counter,
    get_or_create_gauge,
)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_get_or_create_reuses_registered_collector():
    assert (
        get_or_create_counter("georesolver_geocode_requests", "ignored", ["tier"])
        is GEOCODE_REQUESTS
    )


def test_get_or_create_registers_new_gauge():
    gauge = get_or_create_gauge("georesolver_test_gauge", "Test gauge")

    assert get_or_create_gauge("georesolver_test_gauge", "Test gauge") is gauge


async def test_successful_geocode_counts_tier(geocoding_service):
    before = _sample("georesolver_geocode_requests_total", {"tier": "google"})

    await geocoding_service.geocode("Paris")

    assert _sample("georesolver_geocode_requests_total", {"tier": "google"}) == before + 1


async def test_cache_hit_counts_cache_tier(geocoding_service):
    await geocoding_service.geocode("Paris")
    before = _sample("georesolver_geocode_requests_total", {"tier": "cache"})

    await geocoding_service.geocode("Paris")

    assert _sample("georesolver_geocode_requests_total", {"tier": "cache"}) == before + 1


async def test_failure_counts_error_code(geocoding_service, google, nominatim):
    google.geocode.side_effect = NotFoundError("google", "nowhere")
    nominatim.geocode.side_effect = NotFoundError("nominatim", "nowhere")
    labels = {"code": "all-providers-failed"}
    before = _sample("georesolver_geocode_errors_total", labels)

    with pytest.raises(AllProvidersFailedError):
        await geocoding_service.geocode("Qwzxylocation9999")

    assert _sample("georesolver_geocode_errors_total", labels) == before + 1


async def test_latency_is_observed(geocoding_service, mocker):
    observe = mocker.patch.object(GEOCODE_LATENCY, "observe")

    await geocoding_service.geocode("Paris")

    observe.assert_called_once()
    assert observe.call_args.args[0] >= 0


def test_registry_size_gauge(verifier):
    manager = GeographicDataManager(verifier=verifier)
    manager.add_verified_destination(
        {
            "name": "Colosseum",
            "coordinates": {"lat": 41.8902, "lng": 12.4922},
            "accuracy": "high",
            "verification_date": "2024-01-01T00:00:00Z",
            "verified_by": "tester",
            "sources": ["official_tourism"],
            "metadata": {"country": "Italy", "type": "landmark"},
            "confidence": 0.95,
            "update_frequency": "annually",
        }
    )

    assert _sample("georesolver_verified_destinations") == 4
