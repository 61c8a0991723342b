"""Coordinate accuracy verification.

The resolver depends on the ``AccuracyVerifier`` protocol only. The bundled
``BasicAccuracyVerifier`` checks coordinates with ``CoordinateValidator``,
flags well-known placeholder coordinates, honours user reports and replays
recorded corrections, so the resolver works without an external verifier.
"""

from typing import Optional, Protocol

from georesolver.core.geocoding.validator import (
    LOW_PRECISION_WARNING,
    CoordinateValidator,
)
from georesolver.core.logging import get_logger
from georesolver.models.geographic import Coordinates
from georesolver.models.integration import (
    AccuracyIssue,
    AccuracyVerificationResult,
    CoordinateCorrection,
    LocationReport,
)

logger = get_logger(__name__, module="accuracy_verifier")

ACCURATE_THRESHOLD = 0.7

# Coordinates frequently emitted as city-level defaults
PLACEHOLDER_COORDINATES = [
    (Coordinates(lat=37.7749, lng=-122.4194), "SF default coordinates - check if actually in SF"),
    (Coordinates(lat=40.7128, lng=-74.0060), "NYC default coordinates - check if actually in NYC"),
    (
        Coordinates(lat=51.5074, lng=-0.1278),
        "London default coordinates - check if actually in London",
    ),
]


class AccuracyVerifier(Protocol):
    async def verify_coordinate_accuracy(
        self, coordinates: Coordinates, expected_address: Optional[str] = None
    ) -> AccuracyVerificationResult: ...

    async def apply_coordinate_correction(
        self,
        original: Coordinates,
        corrected: Coordinates,
        source: str,
        confidence: float,
        verified_by: Optional[str] = None,
    ) -> None: ...


def coordinate_key(coordinates: Coordinates) -> str:
    """Stable key for a point, rounded to 6 decimals."""
    return f"{round(coordinates.lat, 6)},{round(coordinates.lng, 6)}"


class BasicAccuracyVerifier:
    """In-memory verifier backed by ``CoordinateValidator``."""

    def __init__(self, validator: Optional[CoordinateValidator] = None):
        self.validator = validator if validator is not None else CoordinateValidator()
        self.corrections: dict[str, CoordinateCorrection] = {}
        self.reports: dict[str, list[LocationReport]] = {}
        self.verifications = 0

    async def verify_coordinate_accuracy(
        self, coordinates: Coordinates, expected_address: Optional[str] = None
    ) -> AccuracyVerificationResult:
        self.verifications += 1
        issues: list[AccuracyIssue] = []
        recommendations: list[str] = []
        sources = ["validator"]
        confidence = 1.0

        validation = self.validator.validate(coordinates)
        if not validation.valid:
            issues.append(
                AccuracyIssue(
                    type="boundary_violation",
                    severity="critical",
                    description=validation.error or "Invalid coordinates",
                )
            )
            confidence = 0.0
        elif LOW_PRECISION_WARNING in validation.warnings:
            issues.append(
                AccuracyIssue(
                    type="precision_low",
                    severity="low",
                    description=LOW_PRECISION_WARNING,
                )
            )
            confidence -= 0.1

        for placeholder, reason in PLACEHOLDER_COORDINATES:
            if self.validator.calculate_distance(coordinates, placeholder) < 0.001:
                issues.append(
                    AccuracyIssue(
                        type="suspicious_location", severity="medium", description=reason
                    )
                )
                confidence -= 0.3
                break

        pending = [
            report
            for report in self.reports.get(coordinate_key(coordinates), [])
            if report.status == "pending"
        ]
        if pending:
            issues.append(
                AccuracyIssue(
                    type="data_conflict",
                    severity="medium",
                    description=(
                        f"{len(pending)} accuracy issue(s) reported for this location"
                    ),
                )
            )
            confidence -= 0.2
            recommendations.append(
                "Location has reported accuracy issues - verify manually"
            )

        verified_coordinates = None
        correction = self.corrections.get(coordinate_key(coordinates))
        if correction is not None:
            verified_coordinates = correction.corrected_coordinates
            confidence = max(confidence, correction.confidence)
            recommendations.append("Using previously verified coordinates")
            sources.append(f"correction_{correction.source}")

        recommendations.extend(self._recommendations(issues))

        return AccuracyVerificationResult(
            is_accurate=confidence >= ACCURATE_THRESHOLD
            and not any(issue.severity == "critical" for issue in issues),
            confidence=max(0.0, min(1.0, confidence)),
            issues=issues,
            recommendations=recommendations,
            sources=sources,
            verified_coordinates=verified_coordinates,
        )

    @staticmethod
    def _recommendations(issues: list[AccuracyIssue]) -> list[str]:
        recommendations: list[str] = []
        severe = any(issue.severity in ("high", "critical") for issue in issues)

        if severe:
            recommendations.append(
                "Manual verification required due to high-severity issues"
            )
        if any(issue.type == "coordinate_mismatch" for issue in issues):
            recommendations.append("Cross-reference with multiple sources before using")
        if any(issue.type == "suspicious_location" for issue in issues):
            recommendations.append("Verify coordinates are not placeholder values")
        if not severe and any(issue.severity == "medium" for issue in issues):
            recommendations.append("Additional verification recommended")
        if not issues:
            recommendations.append("Coordinates appear accurate and reliable")

        return recommendations

    async def apply_coordinate_correction(
        self,
        original: Coordinates,
        corrected: Coordinates,
        source: str,
        confidence: float,
        verified_by: Optional[str] = None,
    ) -> None:
        self.corrections[coordinate_key(original)] = CoordinateCorrection(
            original_coordinates=original,
            corrected_coordinates=corrected,
            source=source,
            confidence=confidence,
            verified_by=verified_by,
        )
        logger.info(f"Recorded coordinate correction from {source}")

    def report_location_issue(self, report: LocationReport) -> None:
        self.reports.setdefault(coordinate_key(report.coordinates), []).append(report)

    def get_location_reports(self, coordinates: Coordinates) -> list[LocationReport]:
        return list(self.reports.get(coordinate_key(coordinates), []))

    def get_verification_stats(self) -> dict:
        by_status = {"pending": 0, "verified": 0, "rejected": 0}
        for reports in self.reports.values():
            for report in reports:
                by_status[report.status] += 1

        return {
            "total_verifications": self.verifications,
            "total_reports": sum(by_status.values()),
            "total_corrections": len(self.corrections),
            "reports_by_status": by_status,
        }
