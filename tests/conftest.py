"""Test configuration."""

import os
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; keep tests hermetic
os.environ["TESTING"] = "true"
os.environ.pop("GOOGLE_GEOCODING_API_KEY", None)
os.environ.pop("REDIS_URL", None)

import pytest
from pytest import Config

from georesolver.core.geocoding.executor import DirectExecutor
from georesolver.core.geocoding.service import GeocodingService
from georesolver.core.geographic.manager import GeographicDataManager
from georesolver.core.logging import configure_logging
from georesolver.core.verification import BasicAccuracyVerifier
from georesolver.models.geographic import Coordinates, GeocodeResult

fixture = pytest.fixture


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")


class FakeClock:
    """Manually advanced time source (seconds since the epoch)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.now, tz=timezone.utc)


def make_result(
    lat: float = 48.8566,
    lng: float = 2.3522,
    source: str = "google",
    formatted_address: str = "Paris, France",
    accuracy: str = "high",
) -> GeocodeResult:
    return GeocodeResult(
        coordinates=Coordinates(lat=lat, lng=lng),
        formatted_address=formatted_address,
        accuracy=accuracy,
        source=source,
    )


def make_provider(name: str, result: Any = None, error: Any = None) -> MagicMock:
    """Provider double with async ``geocode``/``reverse``."""
    provider = MagicMock()
    provider.name = name
    provider.geocode = AsyncMock(return_value=result, side_effect=error)
    provider.reverse = AsyncMock()
    return provider


@fixture
def clock() -> FakeClock:
    return FakeClock()


@fixture
def result_factory() -> Callable[..., GeocodeResult]:
    return make_result


@fixture
def provider_factory() -> Callable[..., MagicMock]:
    return make_provider


@fixture
def google(result_factory) -> MagicMock:
    return make_provider("google", result=result_factory(source="google"))


@fixture
def nominatim(result_factory) -> MagicMock:
    return make_provider(
        "nominatim",
        result=result_factory(lat=48.8567, lng=2.3510, source="nominatim", accuracy="medium"),
    )


@fixture
def geocoding_service(google, nominatim, clock) -> GeocodingService:
    """Geocoding service with faked providers and no retries."""
    return GeocodingService(
        executor=DirectExecutor(),
        primary=google,
        secondary=nominatim,
        clock=clock,
    )


@fixture
def verifier() -> BasicAccuracyVerifier:
    return BasicAccuracyVerifier()


@fixture
def manager(verifier) -> GeographicDataManager:
    return GeographicDataManager(verifier=verifier)
