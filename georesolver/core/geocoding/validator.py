"""Geographic coordinate validation and normalization utilities.

This module provides consolidated validation functionality for
geographic coordinates: range, precision, restricted-area and
land/ocean heuristics, plus distance and formatting helpers.

Nothing in here raises for bad coordinates; every outcome is returned
as a ``ValidationResult``.
"""

import math
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from math import atan2, cos, radians, sin, sqrt
from typing import Any, Literal, Optional, Tuple, Union

from georesolver.core.geocoding.constants import (
    DESERT_AREAS,
    EARTH_RADIUS_KM,
    LOW_PRECISION_DECIMALS,
    NORMALIZE_DECIMALS,
    OCEAN_AREAS,
    POLAR_LATITUDE,
    PRECISION_REQUIREMENTS,
    RESTRICTED_AREAS,
)
from georesolver.models.geographic import Coordinates, GeoBounds, ValidationResult

CoordinateLike = Union[Coordinates, Mapping[str, Any], Sequence[Any]]

LOW_PRECISION_WARNING = (
    "Low precision coordinates may not be accurate for city-level navigation"
)
OCEAN_WARNING = (
    "Coordinates appear to be in ocean - verify this is correct for your destination"
)
ARCTIC_WARNING = "Arctic region - extreme weather conditions and limited infrastructure"
ANTARCTIC_WARNING = "Antarctic region - extreme weather conditions and limited access"
DESERT_WARNING = (
    "Coordinates may be in desert region - verify infrastructure availability"
)

_COORDINATE_PATTERNS = [
    re.compile(r"^(-?\d+\.?\d*),\s*(-?\d+\.?\d*)$"),
    re.compile(r"^\((-?\d+\.?\d*),\s*(-?\d+\.?\d*)\)$"),
    re.compile(r"^(-?\d+\.?\d*)\s+(-?\d+\.?\d*)$"),
]


def _raw_pair(coordinates: CoordinateLike) -> Tuple[Any, Any]:
    """Pull lat/lng out of a model, mapping or pair without coercing them."""
    if isinstance(coordinates, Coordinates):
        return coordinates.lat, coordinates.lng
    if isinstance(coordinates, Mapping):
        return coordinates.get("lat"), coordinates.get("lng")
    if isinstance(coordinates, Sequence) and not isinstance(coordinates, str):
        if len(coordinates) == 2:
            return coordinates[0], coordinates[1]
    return None, None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CoordinateValidator:
    """Validates and normalizes geographic coordinates.

    Stateless: every method is a class or static method so the validator can
    be used directly or injected as an instance.
    """

    @classmethod
    def validate(cls, coordinates: CoordinateLike) -> ValidationResult:
        """Run the full validation pipeline on a coordinate pair.

        Args:
            coordinates: ``Coordinates``, ``{"lat": .., "lng": ..}`` or ``(lat, lng)``

        Returns:
            ValidationResult; ``valid`` is False on the first hard failure
        """
        lat, lng = _raw_pair(coordinates)
        warnings: list[str] = []

        if not _is_number(lat) or not _is_number(lng):
            return ValidationResult(valid=False, error="Coordinates must be numbers")

        if math.isnan(lat) or math.isnan(lng):
            return ValidationResult(valid=False, error="Coordinates cannot be NaN")

        if lat < -90 or lat > 90:
            return ValidationResult(
                valid=False, error="Latitude must be between -90 and 90 degrees"
            )

        if lng < -180 or lng > 180:
            return ValidationResult(
                valid=False, error="Longitude must be between -180 and 180 degrees"
            )

        if lat == 0 and lng == 0:
            return ValidationResult(
                valid=False, error="Invalid coordinates (0,0) - Null Island"
            )

        point = Coordinates(lat=float(lat), lng=float(lng))

        accuracy = cls._precision_accuracy(lat, lng)
        if accuracy == "low":
            warnings.append(LOW_PRECISION_WARNING)

        warnings.extend(cls._boundary_warnings(point))

        for area in RESTRICTED_AREAS:
            if area.bounds.contains(point):
                if area.severity == "error":
                    return ValidationResult(
                        valid=False,
                        error=(
                            f"Coordinates fall in restricted area: {area.name}. "
                            f"{area.reason}"
                        ),
                    )
                warnings.append(f"Warning: {area.name} - {area.reason}")

        return ValidationResult(valid=True, accuracy=accuracy, warnings=warnings)

    @classmethod
    def _precision_accuracy(cls, lat: float, lng: float) -> str:
        # Four decimals (~11 m) already satisfies city-level navigation
        if min(cls.decimal_places(lat), cls.decimal_places(lng)) < LOW_PRECISION_DECIMALS:
            return "low"
        return "high"

    @staticmethod
    def _boundary_warnings(point: Coordinates) -> list[str]:
        warnings: list[str] = []

        if any(ocean.contains(point) for ocean in OCEAN_AREAS.values()):
            warnings.append(OCEAN_WARNING)

        if point.lat > POLAR_LATITUDE:
            warnings.append(ARCTIC_WARNING)
        elif point.lat < -POLAR_LATITUDE:
            warnings.append(ANTARCTIC_WARNING)

        if any(desert.contains(point) for desert in DESERT_AREAS.values()):
            warnings.append(DESERT_WARNING)

        return warnings

    @staticmethod
    def decimal_places(value: float) -> int:
        """Count the decimals a number actually carries (``48.80`` -> 1)."""
        try:
            exponent = Decimal(repr(float(value))).normalize().as_tuple().exponent
        except (InvalidOperation, ValueError):
            return 0
        if not isinstance(exponent, int):
            return 0
        return max(0, -exponent)

    @staticmethod
    def normalize(coordinates: CoordinateLike) -> Coordinates:
        """Clamp latitude, wrap longitude into [-180, 180] and round to 6 decimals."""
        lat, lng = _raw_pair(coordinates)
        lat = max(-90.0, min(90.0, float(lat)))
        lng = float(lng)

        while lng > 180:
            lng -= 360
        while lng < -180:
            lng += 360

        return Coordinates(
            lat=round(lat, NORMALIZE_DECIMALS), lng=round(lng, NORMALIZE_DECIMALS)
        )

    @staticmethod
    def calculate_distance(coord1: CoordinateLike, coord2: CoordinateLike) -> float:
        """Great circle (haversine) distance between two points in kilometers."""
        lat1, lng1 = (float(v) for v in _raw_pair(coord1))
        lat2, lng2 = (float(v) for v in _raw_pair(coord2))

        d_lat = radians(lat2 - lat1)
        d_lng = radians(lng2 - lng1)

        a = (
            sin(d_lat / 2) ** 2
            + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lng / 2) ** 2
        )
        c = 2 * atan2(sqrt(a), sqrt(1 - a))
        return EARTH_RADIUS_KM * c

    @classmethod
    def validate_precision(
        cls,
        coordinates: CoordinateLike,
        required_accuracy: Literal["city", "building", "room"],
    ) -> ValidationResult:
        """Check a pair carries enough decimals for the requested resolution."""
        lat, lng = _raw_pair(coordinates)
        if not _is_number(lat) or not _is_number(lng):
            return ValidationResult(valid=False, error="Coordinates must be numbers")

        min_decimals = min(cls.decimal_places(lat), cls.decimal_places(lng))
        required = PRECISION_REQUIREMENTS[required_accuracy]

        if min_decimals < int(required["decimals"]):
            return ValidationResult(
                valid=False,
                error=(
                    f"Insufficient precision for {required_accuracy}-level accuracy. "
                    f"Need {required['decimals']} decimal places "
                    f"({required['accuracy']}), got {min_decimals}"
                ),
            )

        return ValidationResult(valid=True, accuracy="high")

    @classmethod
    def validate_batch(
        cls, coordinates_list: Sequence[CoordinateLike]
    ) -> list[ValidationResult]:
        return [cls.validate(coordinates) for coordinates in coordinates_list]

    @staticmethod
    def format_coordinates(coordinates: Coordinates, precision: int = 6) -> str:
        return f"{coordinates.lat:.{precision}f}, {coordinates.lng:.{precision}f}"

    @staticmethod
    def parse_coordinates(text: str) -> Optional[Coordinates]:
        """Parse ``"lat,lng"``, ``"(lat, lng)"`` or ``"lat lng"``."""
        cleaned = text.strip()
        for pattern in _COORDINATE_PATTERNS:
            match = pattern.match(cleaned)
            if match:
                return Coordinates(lat=float(match.group(1)), lng=float(match.group(2)))
        return None

    @staticmethod
    def create_bounding_box(center: Coordinates, radius_km: float) -> GeoBounds:
        """Approximate box around a point (~111 km per degree of latitude)."""
        lat_delta = radius_km / 111
        lng_delta = radius_km / (111 * cos(radians(center.lat)))
        return GeoBounds(
            north=center.lat + lat_delta,
            south=center.lat - lat_delta,
            east=center.lng + lng_delta,
            west=center.lng - lng_delta,
        )

    @staticmethod
    def is_within_bounds(coordinates: Coordinates, bounds: GeoBounds) -> bool:
        return bounds.contains(coordinates)
