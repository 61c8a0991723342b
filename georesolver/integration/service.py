"""Coordinate integration service.

Single entry point for trip planning: validates destinations against the
verified registry and the geocoding pipeline, attaches coordinate accuracy
information to itinerary activities and runs registry maintenance.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Optional, TypeVar

from georesolver.core.errors import InvalidInputError
from georesolver.core.geocoding.service import GeocodingService
from georesolver.core.geocoding.validator import CoordinateValidator
from georesolver.core.geographic.manager import GeographicDataManager
from georesolver.core.geographic.store import DestinationStore
from georesolver.core.logging import get_logger
from georesolver.core.verification import AccuracyVerifier, BasicAccuracyVerifier
from georesolver.models.geographic import NULL_ISLAND, Coordinates
from georesolver.models.integration import (
    AccuracyIssue,
    AccuracyVerificationResult,
    Activity,
    CoordinateInfo,
    DestinationValidationResult,
)

logger = get_logger(__name__, module="coordinate_integration")

T = TypeVar("T")

PRIMARY_SOURCES = ("google", "cache")


@dataclass
class Outcome(Generic[T]):
    """Result of one item in a concurrent batch: a value or the error raised."""

    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def capture(awaitable: Awaitable[T]) -> Outcome[T]:
    try:
        return Outcome(value=await awaitable)
    except Exception as e:
        return Outcome(error=e)


def _failure_info(description: str, recommendation: str) -> CoordinateInfo:
    return CoordinateInfo(
        accuracy=AccuracyVerificationResult(
            is_accurate=False,
            confidence=0.0,
            issues=[
                AccuracyIssue(type="data_conflict", severity="high", description=description)
            ],
            recommendations=[recommendation],
            sources=[],
        ),
        source="error",
    )


def _error_result(destination: str, warning: str) -> DestinationValidationResult:
    return DestinationValidationResult(
        is_valid=False,
        coordinates=NULL_ISLAND,
        formatted_address=destination,
        accuracy="low",
        source="error",
        warnings=[warning],
    )


class CoordinateIntegrationService:
    """Façade over the registry, geocoding pipeline and accuracy verifier."""

    def __init__(
        self,
        geocoding: Optional[GeocodingService] = None,
        manager: Optional[GeographicDataManager] = None,
        verifier: Optional[AccuracyVerifier] = None,
        validator: Optional[CoordinateValidator] = None,
    ):
        """Initialize the service.

        Args:
            geocoding: Geocoding service, built from settings when omitted
            manager: Destination registry, built from settings when omitted
            verifier: Accuracy verifier, shared with the registry when omitted
            validator: Coordinate validator
        """
        self.validator = validator if validator is not None else CoordinateValidator()
        if verifier is None:
            verifier = manager.verifier if manager is not None else BasicAccuracyVerifier()
        self.verifier: AccuracyVerifier = verifier
        if geocoding is None:
            geocoding = GeocodingService(validator=self.validator)
        self.geocoding = geocoding
        if manager is None:
            manager = GeographicDataManager(
                verifier=self.verifier,
                store=DestinationStore.from_url(),
                validator=self.validator,
            )
        self.manager = manager

    async def validate_destination(self, destination: str) -> DestinationValidationResult:
        """Validate a destination name, preferring the verified registry.

        Never raises; failures come back as an invalid result at (0, 0).
        """
        if not isinstance(destination, str):
            logger.warning(
                f"Rejected destination of type {type(destination).__name__}"
            )
            return _error_result("", "Destination must be a string")

        logger.info(f"Validating destination (length: {len(destination)})")

        try:
            verified = self.manager.find_destination(destination)
            if verified is not None:
                logger.info(f"Found verified destination: {verified.name}")
                return DestinationValidationResult(
                    is_valid=True,
                    coordinates=verified.coordinates,
                    formatted_address=verified.name,
                    accuracy=verified.accuracy,
                    source="verified_database",
                    warnings=[],
                    suggestions=(
                        [f"Also known as: {', '.join(verified.alternative_names)}"]
                        if verified.alternative_names
                        else None
                    ),
                )

            geocoded = await self.geocoding.geocode(destination)
            logger.info(
                f"Geocoding successful: accuracy {geocoded.accuracy}, "
                f"source {geocoded.source}"
            )

            validation = self.validator.validate(geocoded.coordinates)
            if not validation.valid:
                return DestinationValidationResult(
                    is_valid=False,
                    coordinates=geocoded.coordinates,
                    formatted_address=geocoded.formatted_address,
                    accuracy="low",
                    source=geocoded.source,
                    warnings=[validation.error or "Invalid coordinates"],
                )

            verification = await self.verifier.verify_coordinate_accuracy(
                geocoded.coordinates, destination
            )

            warnings = list(validation.warnings)
            warnings.extend(issue.description for issue in verification.issues)
            if geocoded.source not in PRIMARY_SOURCES:
                warnings.append(f"Using backup geocoding service: {geocoded.source}")

            return DestinationValidationResult(
                is_valid=verification.is_accurate,
                coordinates=verification.verified_coordinates or geocoded.coordinates,
                formatted_address=geocoded.formatted_address,
                accuracy=geocoded.accuracy,
                source=geocoded.source,
                warnings=warnings,
                suggestions=verification.recommendations,
            )

        except Exception as e:
            logger.error(
                f"Failed to validate destination (length: {len(destination)}): {e}"
            )
            return _error_result(destination, f"Failed to validate destination: {e}")

    async def validate_destinations(
        self, destinations: list[str]
    ) -> list[DestinationValidationResult]:
        """Validate several destinations concurrently, preserving input order."""
        logger.info(f"Batch validating {len(destinations)} destinations")

        outcomes = await asyncio.gather(
            *(capture(self.validate_destination(d)) for d in destinations)
        )

        results: list[DestinationValidationResult] = []
        for index, (destination, outcome) in enumerate(zip(destinations, outcomes)):
            if outcome.ok:
                results.append(outcome.value)
            else:
                logger.error(
                    f"Failed to validate destination at index {index}: {outcome.error}"
                )
                results.append(
                    _error_result(destination, f"Validation failed: {outcome.error}")
                )
        return results

    async def _enhance_activity(self, activity: Activity) -> Activity:
        location = activity.location
        info: Optional[CoordinateInfo] = None

        if location is not None and location.coordinates is not None:
            accuracy = await self.verifier.verify_coordinate_accuracy(
                location.coordinates, location.address or location.name
            )
            info = CoordinateInfo(
                accuracy=accuracy,
                source="existing",
                verified_destination=self.manager.find_destination(location.coordinates),
            )
        elif location is not None and (location.address or location.name):
            query = location.address or location.name
            try:
                geocoded = await self.geocoding.geocode(query)
                accuracy = await self.verifier.verify_coordinate_accuracy(
                    geocoded.coordinates, query
                )
                info = CoordinateInfo(accuracy=accuracy, source=geocoded.source)
                location.coordinates = geocoded.coordinates
            except Exception as e:
                logger.warning(
                    f"Failed to geocode activity location (ID: {activity.id}): {e}"
                )
                info = _failure_info(
                    "Failed to geocode location",
                    "Manually set coordinates for this activity",
                )

        return activity.model_copy(update={"coordinate_info": info})

    async def enhance_activities_with_coordinates(
        self, activities: list[Activity]
    ) -> list[Activity]:
        """Attach coordinate accuracy information to each activity.

        Activities that only carry an address or name are geocoded and their
        ``location.coordinates`` set in place. A failing activity gets a
        zero-confidence marker instead of aborting the batch.
        """
        logger.info(f"Enhancing {len(activities)} activities with coordinate validation")

        outcomes = await asyncio.gather(
            *(capture(self._enhance_activity(activity)) for activity in activities)
        )

        enhanced: list[Activity] = []
        for activity, outcome in zip(activities, outcomes):
            if outcome.ok:
                enhanced.append(outcome.value)
            else:
                logger.error(f"Failed to enhance activity (ID: {activity.id}): {outcome.error}")
                enhanced.append(
                    activity.model_copy(
                        update={
                            "coordinate_info": _failure_info(
                                "Enhancement failed", "Manual verification required"
                            )
                        }
                    )
                )

        logger.info(f"Enhanced {len(enhanced)} activities with coordinate information")
        return enhanced

    async def apply_user_coordinate_correction(
        self,
        activity_id: str,
        coordinates: Coordinates,
        address: str,
        user_id: str,
        original: Optional[Coordinates] = None,
    ) -> None:
        """Record a user's manual coordinates for an activity.

        The correction is keyed by ``original``, the activity's previous
        coordinates, so later verification of that point returns the user's
        coordinates. Without ``original`` it is keyed by the corrected point
        itself, which marks those coordinates as user-confirmed.

        Raises:
            InvalidInputError: The corrected coordinates fail validation
        """
        logger.info(f"Applying user coordinate correction for activity {activity_id}")

        validation = self.validator.validate(coordinates)
        if not validation.valid:
            raise InvalidInputError(f"Invalid coordinates: {validation.error}")

        await self.verifier.apply_coordinate_correction(
            original if original is not None else coordinates,
            coordinates,
            "user_manual",
            0.9,
            user_id,
        )
        logger.info("Applied user coordinate correction successfully")

    async def schedule_quarterly_updates(self) -> int:
        """Queue every due destination and process the queue.

        Returns:
            Number of destinations refreshed
        """
        logger.info("Scheduling quarterly data updates")
        for destination in self.manager.get_all_verified_destinations():
            self.manager.schedule_data_update(destination.id)
        refreshed = await self.manager.process_update_queue()
        logger.info("Completed quarterly update scheduling")
        return refreshed

    async def perform_maintenance(self) -> None:
        logger.info("Performing coordinate system maintenance")
        self.geocoding.clear_cache()
        await self.schedule_quarterly_updates()
        logger.info("Maintenance completed")

    def get_coordinate_stats(self) -> dict[str, Any]:
        geocoding_stats = self.geocoding.get_stats()
        cache_stats = self.geocoding.get_cache_stats()
        geographic_stats = self.manager.get_system_stats()

        verification_stats: dict[str, Any] = {}
        stats_provider = getattr(self.verifier, "get_verification_stats", None)
        if callable(stats_provider):
            verification_stats = stats_provider()

        total_requests = geocoding_stats.total_requests
        return {
            "geocoding": {
                **geocoding_stats.model_dump(),
                "cache_hit_rate": cache_stats["hit_rate"],
                "cache_size": cache_stats["size"],
            },
            "verification": verification_stats,
            "geographic": geographic_stats,
            "overall": {
                "total_operations": total_requests
                + verification_stats.get("total_reports", 0),
                "success_rate": (
                    (total_requests - geocoding_stats.errors) / total_requests
                    if total_requests > 0
                    else 0.0
                ),
                "average_accuracy": geographic_stats["average_confidence"],
            },
        }


_integration_service: Optional[CoordinateIntegrationService] = None


def get_integration_service() -> CoordinateIntegrationService:
    """Get or create the shared integration service instance."""
    global _integration_service
    if _integration_service is None:
        _integration_service = CoordinateIntegrationService()
    return _integration_service
