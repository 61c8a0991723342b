"""Seed catalog for the verified destination registry."""

from datetime import datetime, timezone

from georesolver.models.geographic import (
    Coordinates,
    DataSource,
    DestinationMetadata,
    NewDestination,
)

# Source reliability ranking used for conflict resolution; unlisted sources rank as "unknown"
SOURCE_HIERARCHY: dict[str, int] = {
    "government_survey": 10,
    "official_tourism": 9,
    "verified_manual": 8,
    "google_verified": 7,
    "google": 6,
    "nominatim": 5,
    "crowdsourced_verified": 4,
    "crowdsourced": 3,
    "fallback": 2,
    "unknown": 1,
}

# Sources ranked at or above this win a conflict outright
HIGH_RELIABILITY_RANK = 7

UPDATE_INTERVAL_DAYS: dict[str, int] = {
    "weekly": 7,
    "monthly": 30,
    "quarterly": 90,
    "annually": 365,
}

SEED_VERIFICATION_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _seed(
    name: str,
    lat: float,
    lng: float,
    sources: list[str],
    alternative_names: list[str],
    country: str,
    admin_area: str,
    locality: str,
    popularity: int,
) -> NewDestination:
    return NewDestination(
        name=name,
        coordinates=Coordinates(lat=lat, lng=lng),
        accuracy="high",
        verification_date=SEED_VERIFICATION_DATE,
        verified_by="system",
        sources=sources,
        alternative_names=alternative_names,
        metadata=DestinationMetadata(
            country=country,
            admin_area=admin_area,
            locality=locality,
            type="landmark",
            popularity=popularity,
        ),
        confidence=1.0,
        update_frequency="annually",
    )


INITIAL_DESTINATIONS: list[NewDestination] = [
    _seed(
        "Eiffel Tower",
        48.8584,
        2.2945,
        ["government_survey", "google_verified"],
        ["Tour Eiffel", "Iron Lady"],
        "France",
        "Île-de-France",
        "Paris",
        10,
    ),
    _seed(
        "Times Square",
        40.7580,
        -73.9855,
        ["official_tourism", "google_verified"],
        ["The Crossroads of the World", "The Great White Way"],
        "United States",
        "New York",
        "New York City",
        10,
    ),
    _seed(
        "Sydney Opera House",
        -33.8568,
        151.2153,
        ["government_survey", "official_tourism"],
        ["Opera House Sydney"],
        "Australia",
        "New South Wales",
        "Sydney",
        9,
    ),
]


def initial_data_sources(now: datetime) -> list[DataSource]:
    return [
        DataSource(
            name="google",
            type="api",
            reliability=0.9,
            last_used=now,
            success_rate=0.95,
            average_accuracy="high",
        ),
        DataSource(
            name="nominatim",
            type="api",
            reliability=0.7,
            last_used=now,
            success_rate=0.85,
            average_accuracy="medium",
        ),
        DataSource(
            name="manual",
            type="manual",
            reliability=0.95,
            last_used=now,
            success_rate=1.0,
            average_accuracy="high",
        ),
        DataSource(
            name="fallback",
            type="manual",
            reliability=0.8,
            last_used=now,
            success_rate=1.0,
            average_accuracy="medium",
        ),
    ]
