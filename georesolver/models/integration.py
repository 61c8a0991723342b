"""Models exchanged with the accuracy verifier and façade callers."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from georesolver.models.geographic import Accuracy, Coordinates, VerifiedDestination


class AccuracyIssue(BaseModel):
    type: Literal[
        "suspicious_location",
        "coordinate_mismatch",
        "precision_low",
        "boundary_violation",
        "data_conflict",
    ]
    severity: Literal["low", "medium", "high", "critical"]
    description: str


class AccuracyVerificationResult(BaseModel):
    is_accurate: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    issues: list[AccuracyIssue] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    verified_coordinates: Coordinates | None = None


class CoordinateCorrection(BaseModel):
    original_coordinates: Coordinates
    corrected_coordinates: Coordinates
    source: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    applied_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    verified_by: str | None = None


class LocationReport(BaseModel):
    """A user report that a location is wrong or no longer usable."""

    coordinates: Coordinates
    address: str
    reported_by: str
    reported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    issue_type: Literal[
        "incorrect_coordinates", "outdated_address", "place_closed", "access_restricted"
    ]
    description: str
    status: Literal["pending", "verified", "rejected"] = "pending"


class DestinationValidationResult(BaseModel):
    is_valid: bool
    coordinates: Coordinates
    formatted_address: str
    accuracy: Accuracy
    source: str
    warnings: list[str] = Field(default_factory=list)
    suggestions: list[str] | None = None


class ActivityLocation(BaseModel):
    name: str | None = None
    address: str | None = None
    coordinates: Coordinates | None = None


class CoordinateInfo(BaseModel):
    accuracy: AccuracyVerificationResult
    source: str
    verified_destination: VerifiedDestination | None = None
    user_corrected: bool = False


class Activity(BaseModel):
    """Itinerary activity as handed over by the trip planner.

    Only the fields the resolver touches are modelled; anything else the
    planner sends is kept as-is.
    """

    id: str
    name: str
    location: ActivityLocation | None = None
    coordinate_info: CoordinateInfo | None = None

    model_config = {"extra": "allow"}
