"""Geographic models for coordinate resolution."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Accuracy = Literal["high", "medium", "low"]
UpdateFrequency = Literal["weekly", "monthly", "quarterly", "annually"]
ResolutionStrategy = Literal[
    "manual_review", "highest_reliability", "most_recent", "consensus"
]


class Coordinates(BaseModel):
    """A latitude/longitude pair in decimal degrees.

    Range checks live in ``CoordinateValidator`` so invalid pairs can still be
    represented and reported on.
    """

    lat: float = Field(..., description="Latitude in decimal degrees")
    lng: float = Field(..., description="Longitude in decimal degrees")

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


NULL_ISLAND = Coordinates(lat=0.0, lng=0.0)


class GeoBounds(BaseModel):
    """Axis-aligned box used for restricted, ocean and desert areas."""

    north: float
    south: float
    east: float
    west: float

    model_config = ConfigDict(frozen=True)

    def contains(self, coordinates: Coordinates) -> bool:
        return (
            self.south <= coordinates.lat <= self.north
            and self.west <= coordinates.lng <= self.east
        )


class RestrictedArea(BaseModel):
    """A zone travellers cannot (error) or should think twice (warning) about."""

    name: str
    bounds: GeoBounds
    reason: str
    severity: Literal["warning", "error"]

    model_config = ConfigDict(frozen=True)


class ValidationResult(BaseModel):
    """Outcome of a coordinate validation; produced fresh per call."""

    valid: bool
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)
    accuracy: Accuracy | None = None


class AddressComponents(BaseModel):
    country: str | None = None
    admin_area: str | None = None
    locality: str | None = None
    postal_code: str | None = None

    model_config = ConfigDict(frozen=True)


class ReverseAddressComponents(AddressComponents):
    street_number: str | None = None
    route: str | None = None


class BoundingBox(BaseModel):
    """Viewport reported by a provider for a result."""

    northeast: Coordinates
    southwest: Coordinates

    model_config = ConfigDict(frozen=True)


class GeocodeResult(BaseModel):
    """A resolved address. Immutable; cache replays are tagged ``cache``."""

    coordinates: Coordinates
    formatted_address: str
    place_id: str | None = None
    accuracy: Accuracy
    source: Literal["google", "nominatim", "manual", "cache"]
    components: AddressComponents = Field(default_factory=AddressComponents)
    bounding_box: BoundingBox | None = None

    model_config = ConfigDict(frozen=True)


class ReverseGeocodeResult(BaseModel):
    address: str
    coordinates: Coordinates
    accuracy: Accuracy
    source: Literal["google", "nominatim", "manual"]
    components: ReverseAddressComponents = Field(
        default_factory=ReverseAddressComponents
    )

    model_config = ConfigDict(frozen=True)


class CachedEntry(BaseModel):
    result: GeocodeResult
    timestamp: float
    hits: int = 0


class RateLimitWindow(BaseModel):
    requests: list[float] = Field(default_factory=list)
    window_start: float


class DestinationMetadata(BaseModel):
    country: str
    admin_area: str | None = None
    locality: str | None = None
    type: Literal["city", "landmark", "region", "poi"]
    popularity: int = Field(default=5, ge=1, le=10)


class NewDestination(BaseModel):
    """Registration payload for a verified destination (no id yet)."""

    name: str
    coordinates: Coordinates
    accuracy: Accuracy
    verification_date: datetime
    verified_by: str
    sources: list[str] = Field(default_factory=list)
    alternative_names: list[str] = Field(default_factory=list)
    metadata: DestinationMetadata
    confidence: float = Field(..., ge=0.0, le=1.0)
    update_frequency: UpdateFrequency = "quarterly"


class VerifiedDestination(NewDestination):
    id: str
    last_updated: datetime


class CoordinateOption(BaseModel):
    """One source's opinion about where a place is."""

    coordinates: Coordinates
    source: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class ConflictResolution(BaseModel):
    conflict_id: str
    destination: str
    coordinates: list[Coordinates]
    sources: list[str]
    resolution: ResolutionStrategy
    resolved_coordinates: Coordinates | None = None
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    confidence: float


class DataSource(BaseModel):
    name: str
    type: Literal["api", "manual", "crowdsourced", "official"]
    reliability: float = Field(..., ge=0.0, le=1.0)
    last_used: datetime
    success_rate: float
    average_accuracy: Accuracy
