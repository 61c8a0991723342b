"""Verified destination registry.

Keeps curated coordinates for popular destinations, arbitrates between
conflicting coordinate sources and schedules periodic re-verification.
"""

import hashlib
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from georesolver.core.config import settings
from georesolver.core.errors import (
    ConflictUnresolvedError,
    DestinationNotFoundError,
    GeoResolverError,
    InvalidInputError,
    RegistrationConflictError,
)
from georesolver.core.geocoding.validator import CoordinateValidator
from georesolver.core.geographic.seeds import (
    HIGH_RELIABILITY_RANK,
    INITIAL_DESTINATIONS,
    SOURCE_HIERARCHY,
    UPDATE_INTERVAL_DAYS,
    initial_data_sources,
)
from georesolver.core.geographic.store import DestinationStore
from georesolver.core.logging import get_logger
from georesolver.core.metrics import VERIFIED_DESTINATIONS
from georesolver.core.verification import AccuracyVerifier, BasicAccuracyVerifier
from georesolver.models.geographic import (
    ConflictResolution,
    CoordinateOption,
    Coordinates,
    DataSource,
    NewDestination,
    ResolutionStrategy,
    VerifiedDestination,
)

logger = get_logger(__name__, module="geographic_data_manager")

DUPLICATE_RADIUS_KM = 0.1
CONSENSUS_RADIUS_KM = 0.1
COORDINATE_MATCH_RADIUS_KM = 0.01

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_destination_id(name: str, coordinates: Coordinates) -> str:
    """Slugged name plus a base36 hash of the coordinates."""
    slug = re.sub(r"[^a-z0-9]", "-", name.lower())
    coordinate_hash = round(abs(coordinates.lat * 1_000_000 + coordinates.lng * 1_000_000))
    return f"{slug}-{_base36(coordinate_hash)}"


def source_rank(source: str) -> int:
    return SOURCE_HIERARCHY.get(source, SOURCE_HIERARCHY["unknown"])


class GeographicDataManager:
    """Registry of verified destinations with conflict resolution."""

    def __init__(
        self,
        verifier: Optional[AccuracyVerifier] = None,
        store: Optional[DestinationStore] = None,
        validator: Optional[CoordinateValidator] = None,
        clock: Callable[[], datetime] = _utcnow,
        conflict_bucket_seconds: Optional[int] = None,
        load_seeds: bool = True,
    ):
        """Initialize the registry.

        Args:
            verifier: Accuracy verifier used for corrections and refreshes
            store: Optional Redis store; loaded over the seeds and written through
            validator: Coordinate validator
            clock: Source of timezone-aware "now"
            conflict_bucket_seconds: Memo window for conflict resolutions
            load_seeds: Register the built-in landmark catalog
        """
        self.verifier: AccuracyVerifier = (
            verifier if verifier is not None else BasicAccuracyVerifier()
        )
        self.store = store
        self.validator = validator if validator is not None else CoordinateValidator()
        self._clock = clock
        self.conflict_bucket_seconds = (
            conflict_bucket_seconds
            if conflict_bucket_seconds is not None
            else settings.CONFLICT_TIME_BUCKET_SECONDS
        )

        self._destinations: dict[str, VerifiedDestination] = {}
        self._data_sources: dict[str, DataSource] = {
            source.name: source for source in initial_data_sources(self._clock())
        }
        self._conflict_resolutions: dict[str, ConflictResolution] = {}
        # dict keys keep insertion order and deduplicate
        self._update_queue: dict[str, None] = {}

        if load_seeds:
            for seed in INITIAL_DESTINATIONS:
                try:
                    self._register(seed, persist=False)
                except GeoResolverError as e:
                    logger.warning(f"Failed to load initial destination {seed.name}: {e}")

        if self.store is not None:
            for destination in self.store.load_all():
                self._destinations[destination.id] = destination
            logger.info(f"Loaded {len(self._destinations)} verified destinations")

        VERIFIED_DESTINATIONS.set(len(self._destinations))

    def _save(self, destination: VerifiedDestination) -> None:
        self._destinations[destination.id] = destination
        if self.store is not None:
            self.store.save(destination)
        VERIFIED_DESTINATIONS.set(len(self._destinations))

    def _get(self, destination_id: str) -> VerifiedDestination:
        destination = self._destinations.get(destination_id)
        if destination is None:
            raise DestinationNotFoundError(destination_id)
        return destination

    def _register(self, data: NewDestination, persist: bool = True) -> str:
        validation = self.validator.validate(data.coordinates)
        if not validation.valid:
            raise InvalidInputError(f"Invalid coordinates: {validation.error}")

        destination_id = generate_destination_id(data.name, data.coordinates)

        existing = self.find_nearby_destination(data.coordinates, DUPLICATE_RADIUS_KM)
        if existing is not None and existing.id != destination_id:
            raise RegistrationConflictError(existing.id, existing.name)

        destination = VerifiedDestination(
            **data.model_dump(), id=destination_id, last_updated=self._clock()
        )
        if persist:
            self._save(destination)
        else:
            self._destinations[destination_id] = destination

        logger.info(f"Added verified destination: {data.name} ({destination_id})")
        return destination_id

    def add_verified_destination(
        self, data: Union[NewDestination, Mapping[str, Any]]
    ) -> str:
        """Register a destination and return its id.

        Raises:
            InvalidInputError: Coordinates fail validation
            RegistrationConflictError: Another destination sits within 100 m
        """
        if not isinstance(data, NewDestination):
            data = NewDestination.model_validate(data)
        return self._register(data)

    async def update_destination_coordinates(
        self,
        destination_id: str,
        coordinates: Coordinates,
        source: str,
        verified_by: str,
    ) -> VerifiedDestination:
        """Apply a manual correction to a registered destination.

        The correction is recorded with the accuracy verifier, ``source`` moves
        to the front of the source list and confidence rises by 0.1 (max 1.0).
        """
        destination = self._get(destination_id)

        validation = self.validator.validate(coordinates)
        if not validation.valid:
            raise InvalidInputError(f"Invalid coordinates: {validation.error}")

        await self.verifier.apply_coordinate_correction(
            destination.coordinates, coordinates, source, 0.9, verified_by
        )

        now = self._clock()
        updated = destination.model_copy(
            update={
                "coordinates": coordinates,
                "verified_by": verified_by,
                "verification_date": now,
                "last_updated": now,
                "sources": [source] + [s for s in destination.sources if s != source],
                "confidence": min(1.0, destination.confidence + 0.1),
            }
        )
        self._save(updated)

        logger.info(
            f"Updated coordinates for {destination.name}: "
            f"{self.validator.format_coordinates(self.validator.normalize(coordinates))}"
        )
        return updated

    def _conflict_id(self, destination_name: str, option_count: int) -> str:
        bucket = int(self._clock().timestamp() // self.conflict_bucket_seconds)
        signature = f"{destination_name}|{option_count}|{bucket}"
        return hashlib.sha256(signature.encode("utf-8")).hexdigest()[:16]

    def resolve_coordinate_conflict(
        self, destination_name: str, options: list[CoordinateOption]
    ) -> ConflictResolution:
        """Pick coordinates for a destination that several sources disagree on.

        Strategies, in order: a highly reliable source wins outright; otherwise
        the centroid of the largest cluster of agreeing sources; otherwise the
        most confident option, flagged for manual review. Repeated calls for
        the same name and option count within one time bucket return the
        memoized resolution.

        Raises:
            ConflictUnresolvedError: No options were given
        """
        if not options:
            raise ConflictUnresolvedError(
                f"No coordinate options to resolve for {destination_name}"
            )

        conflict_id = self._conflict_id(destination_name, len(options))
        existing = self._conflict_resolutions.get(conflict_id)
        if existing is not None:
            return existing

        strategy, coordinates, confidence = self._apply_resolution_strategy(options)

        resolution = ConflictResolution(
            conflict_id=conflict_id,
            destination=destination_name,
            coordinates=[option.coordinates for option in options],
            sources=[option.source for option in options],
            resolution=strategy,
            resolved_coordinates=coordinates,
            resolved_by="system",
            resolved_at=self._clock(),
            confidence=confidence,
        )
        self._conflict_resolutions[conflict_id] = resolution

        logger.info(f"Resolved coordinate conflict for {destination_name} using {strategy}")
        return resolution

    def _apply_resolution_strategy(
        self, options: list[CoordinateOption]
    ) -> tuple[ResolutionStrategy, Coordinates, float]:
        ranked = sorted(options, key=lambda option: source_rank(option.source), reverse=True)
        best = ranked[0]
        if source_rank(best.source) >= HIGH_RELIABILITY_RANK:
            return "highest_reliability", best.coordinates, best.confidence

        consensus = self._find_consensus(options)
        if consensus is not None:
            coordinates, confidence = consensus
            return "consensus", coordinates, confidence

        most_confident = max(options, key=lambda option: option.confidence)
        return "manual_review", most_confident.coordinates, most_confident.confidence * 0.8

    def _find_consensus(
        self, options: list[CoordinateOption]
    ) -> Optional[tuple[Coordinates, float]]:
        if len(options) < 2:
            return None

        groups: list[list[CoordinateOption]] = []
        for option in options:
            for group in groups:
                centroid = self._average([member.coordinates for member in group])
                distance = self.validator.calculate_distance(option.coordinates, centroid)
                if distance <= CONSENSUS_RADIUS_KM:
                    group.append(option)
                    break
            else:
                groups.append([option])

        largest = max(groups, key=len)
        if len(largest) < 2:
            return None

        centroid = self._average([member.coordinates for member in largest])
        mean_confidence = sum(member.confidence for member in largest) / len(largest)
        return centroid, min(1.0, mean_confidence * 1.1)

    def _average(self, points: list[Coordinates]) -> Coordinates:
        lat = sum(point.lat for point in points) / len(points)
        lng = sum(point.lng for point in points) / len(points)
        return self.validator.normalize(Coordinates(lat=lat, lng=lng))

    def find_destination(
        self, query: Union[str, Coordinates]
    ) -> Optional[VerifiedDestination]:
        """Look a destination up by name (exact, then substring) or by coordinates."""
        if isinstance(query, Coordinates):
            return self.find_nearby_destination(query, COORDINATE_MATCH_RADIUS_KM)

        needle = query.strip().lower()
        if not needle:
            return None

        for destination in self._destinations.values():
            names = [destination.name, *destination.alternative_names]
            if any(name.lower() == needle for name in names):
                return destination

        for destination in self._destinations.values():
            names = [destination.name, *destination.alternative_names]
            if any(needle in name.lower() for name in names):
                return destination

        return None

    def find_nearby_destination(
        self, coordinates: Coordinates, radius_km: float = 1.0
    ) -> Optional[VerifiedDestination]:
        closest = None
        closest_distance = float("inf")

        for destination in self._destinations.values():
            distance = self.validator.calculate_distance(
                coordinates, destination.coordinates
            )
            if distance <= radius_km and distance < closest_distance:
                closest = destination
                closest_distance = distance

        return closest

    def schedule_data_update(self, destination_id: str) -> bool:
        """Queue a destination for re-verification if it is due.

        Returns:
            True when the destination was queued
        """
        destination = self._get(destination_id)

        age_days = (self._clock() - destination.last_updated).total_seconds() / 86400
        if age_days >= UPDATE_INTERVAL_DAYS[destination.update_frequency]:
            self._update_queue[destination_id] = None
            logger.info(f"Scheduled update for {destination.name}")
            return True
        return False

    async def process_update_queue(self) -> int:
        """Drain the update queue, re-verifying each destination.

        Returns:
            Number of destinations refreshed
        """
        pending = list(self._update_queue)
        self._update_queue.clear()

        refreshed = 0
        for destination_id in pending:
            try:
                await self._refresh_destination(destination_id)
                refreshed += 1
            except Exception as e:
                logger.error(f"Failed to update {destination_id}: {e}")

        return refreshed

    async def _refresh_destination(self, destination_id: str) -> None:
        destination = self._destinations.get(destination_id)
        if destination is None:
            return

        verification = await self.verifier.verify_coordinate_accuracy(
            destination.coordinates, destination.name
        )

        update: dict[str, Any] = {"last_updated": self._clock()}
        if not verification.is_accurate and verification.verified_coordinates:
            update["coordinates"] = verification.verified_coordinates
            update["confidence"] = verification.confidence
            logger.info(f"Updated {destination.name} with verified coordinates")

        self._save(destination.model_copy(update=update))

    def get_destination(self, destination_id: str) -> VerifiedDestination:
        return self._get(destination_id)

    def get_all_verified_destinations(self) -> list[VerifiedDestination]:
        return list(self._destinations.values())

    def get_data_source_stats(self) -> list[DataSource]:
        return list(self._data_sources.values())

    def get_conflict_resolutions(self) -> list[ConflictResolution]:
        return list(self._conflict_resolutions.values())

    def get_update_queue(self) -> list[str]:
        return list(self._update_queue)

    def get_average_confidence(self) -> float:
        if not self._destinations:
            return 0.0
        return sum(d.confidence for d in self._destinations.values()) / len(
            self._destinations
        )

    def get_system_stats(self) -> dict[str, Any]:
        return {
            "total_destinations": len(self._destinations),
            "pending_updates": len(self._update_queue),
            "resolved_conflicts": len(self._conflict_resolutions),
            "average_confidence": self.get_average_confidence(),
            "data_source_count": len(self._data_sources),
        }
