"""Data models for the coordinate resolution engine."""

from georesolver.models.geographic import (
    NULL_ISLAND,
    AddressComponents,
    BoundingBox,
    CachedEntry,
    ConflictResolution,
    CoordinateOption,
    Coordinates,
    DataSource,
    DestinationMetadata,
    GeoBounds,
    GeocodeResult,
    NewDestination,
    RateLimitWindow,
    RestrictedArea,
    ReverseAddressComponents,
    ReverseGeocodeResult,
    ValidationResult,
    VerifiedDestination,
)
from georesolver.models.integration import (
    AccuracyIssue,
    AccuracyVerificationResult,
    Activity,
    ActivityLocation,
    CoordinateCorrection,
    CoordinateInfo,
    DestinationValidationResult,
    LocationReport,
)

__all__ = [
    "NULL_ISLAND",
    "AccuracyIssue",
    "AccuracyVerificationResult",
    "Activity",
    "ActivityLocation",
    "AddressComponents",
    "BoundingBox",
    "CachedEntry",
    "ConflictResolution",
    "CoordinateCorrection",
    "CoordinateInfo",
    "CoordinateOption",
    "Coordinates",
    "DataSource",
    "DestinationMetadata",
    "DestinationValidationResult",
    "GeoBounds",
    "GeocodeResult",
    "LocationReport",
    "NewDestination",
    "RateLimitWindow",
    "RestrictedArea",
    "ReverseAddressComponents",
    "ReverseGeocodeResult",
    "ValidationResult",
    "VerifiedDestination",
]
