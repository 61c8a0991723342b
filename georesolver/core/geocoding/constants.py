"""Geographic constants for coordinate validation and geocoding.

This module contains the restricted, ocean and desert areas used by the
validator, the curated manual coordinate table used as the last geocoding
tier, and the provider accuracy mappings.
"""

from georesolver.models.geographic import (
    AddressComponents,
    Coordinates,
    GeoBounds,
    GeocodeResult,
    RestrictedArea,
)

EARTH_RADIUS_KM = 6371.0

NORMALIZE_DECIMALS = 6

# Polar circles
POLAR_LATITUDE = 66.5

RESTRICTED_AREAS: list[RestrictedArea] = [
    # Military bases and restricted zones
    RestrictedArea(
        name="Area 51",
        bounds=GeoBounds(north=37.3, south=37.0, east=-115.7, west=-116.0),
        reason="Military restricted area",
        severity="error",
    ),
    RestrictedArea(
        name="North Pole Research Area",
        bounds=GeoBounds(north=90, south=89.5, east=180, west=-180),
        reason="Extreme environment, no tourist infrastructure",
        severity="warning",
    ),
    RestrictedArea(
        name="Antarctica Interior",
        bounds=GeoBounds(north=-80, south=-90, east=180, west=-180),
        reason="Extreme environment, special permits required",
        severity="warning",
    ),
    # Disputed territories
    RestrictedArea(
        name="Kashmir Disputed Zone",
        bounds=GeoBounds(north=37.0, south=32.0, east=80.0, west=72.0),
        reason="Politically sensitive area",
        severity="warning",
    ),
]

# Major ocean areas (coarse land vs ocean heuristic)
OCEAN_AREAS: dict[str, GeoBounds] = {
    "Pacific (east)": GeoBounds(north=60, south=-60, east=-70, west=-180),
    "Pacific (west)": GeoBounds(north=60, south=-60, east=180, west=120),
    "Atlantic": GeoBounds(north=70, south=-60, east=-10, west=-80),
    "Indian": GeoBounds(north=30, south=-60, east=120, west=20),
    "Arctic": GeoBounds(north=90, south=66, east=180, west=-180),
}

DESERT_AREAS: dict[str, GeoBounds] = {
    "Sahara": GeoBounds(north=35, south=15, east=35, west=-15),
    "Arabian": GeoBounds(north=35, south=15, east=60, west=35),
    "Gobi": GeoBounds(north=50, south=40, east=120, west=100),
    "Australian Outback": GeoBounds(north=-15, south=-35, east=155, west=115),
}

# Decimal places required per use case
PRECISION_REQUIREMENTS: dict[str, dict[str, int | str]] = {
    "city": {"decimals": 4, "accuracy": "~11 meters"},
    "building": {"decimals": 5, "accuracy": "~1 meter"},
    "room": {"decimals": 6, "accuracy": "~0.1 meter"},
}

# Below this many decimals on either axis a coordinate is low precision
LOW_PRECISION_DECIMALS = 4

# Google location_type -> accuracy
GOOGLE_LOCATION_TYPE_ACCURACY = {
    "ROOFTOP": "high",
    "RANGE_INTERPOLATED": "medium",
    "GEOMETRIC_CENTER": "low",
    "APPROXIMATE": "low",
}

# Nominatim OSM class/type hints
NOMINATIM_HIGH_ACCURACY = {"class": {"building"}, "type": {"house"}}
NOMINATIM_MEDIUM_ACCURACY = {"class": {"highway"}, "type": {"residential"}}

# Characters stripped from addresses before anything else happens
UNSAFE_ADDRESS_CHARS = r"[<>\"\\/&;$`|]"
# Everything outside this set is dropped after the unsafe pass
SAFE_ADDRESS_CHARS = r"[^\w\s\-.,#()]"
MIN_ADDRESS_LENGTH = 2

# Fraction of the cache evicted when it is full
CACHE_EVICTION_FRACTION = 0.1


def _manual(
    lat: float,
    lng: float,
    formatted_address: str,
    country: str,
    locality: str,
    admin_area: str | None = None,
) -> GeocodeResult:
    return GeocodeResult(
        coordinates=Coordinates(lat=lat, lng=lng),
        formatted_address=formatted_address,
        accuracy="high",
        source="manual",
        components=AddressComponents(
            country=country, locality=locality, admin_area=admin_area
        ),
    )


# Curated coordinates for well-known places, used when every provider fails
MANUAL_COORDINATES: dict[str, GeocodeResult] = {
    "paris": _manual(48.8566, 2.3522, "Paris, France", "France", "Paris"),
    "london": _manual(
        51.5074, -0.1278, "London, United Kingdom", "United Kingdom", "London"
    ),
    "tokyo": _manual(35.6762, 139.6503, "Tokyo, Japan", "Japan", "Tokyo"),
    "new york": _manual(
        40.7128,
        -74.0060,
        "New York, NY, USA",
        "United States",
        "New York",
        admin_area="New York",
    ),
    "sydney": _manual(
        -33.8688,
        151.2093,
        "Sydney NSW, Australia",
        "Australia",
        "Sydney",
        admin_area="New South Wales",
    ),
}
