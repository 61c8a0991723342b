"""Tests for the bundled accuracy verifier."""

import pytest

from georesolver.core.verification import BasicAccuracyVerifier, coordinate_key
from georesolver.models.geographic import Coordinates
from georesolver.models.integration import LocationReport

PARIS = Coordinates(lat=48.8566, lng=2.3522)
LONDON_DEFAULT = Coordinates(lat=51.5074, lng=-0.1278)


def _report(coordinates: Coordinates, status: str = "pending") -> LocationReport:
    return LocationReport(
        coordinates=coordinates,
        address="Somewhere",
        reported_by="user-1",
        issue_type="incorrect_coordinates",
        description="Pin is on the wrong street",
        status=status,
    )


def test_coordinate_key_rounds_to_six_decimals():
    assert coordinate_key(Coordinates(lat=48.85660001, lng=2.3522)) == "48.8566,2.3522"


async def test_accurate_coordinates(verifier: BasicAccuracyVerifier):
    result = await verifier.verify_coordinate_accuracy(PARIS, "Paris")

    assert result.is_accurate is True
    assert result.confidence == 1.0
    assert result.issues == []
    assert result.recommendations == ["Coordinates appear accurate and reliable"]
    assert result.sources == ["validator"]
    assert result.verified_coordinates is None


async def test_invalid_coordinates_are_critical(verifier: BasicAccuracyVerifier):
    result = await verifier.verify_coordinate_accuracy(Coordinates(lat=0.0, lng=0.0))

    assert result.is_accurate is False
    assert result.confidence == 0.0
    assert result.issues[0].type == "boundary_violation"
    assert result.issues[0].severity == "critical"
    assert "Manual verification required due to high-severity issues" in (
        result.recommendations
    )


async def test_low_precision_lowers_confidence(verifier: BasicAccuracyVerifier):
    result = await verifier.verify_coordinate_accuracy(Coordinates(lat=48.85, lng=2.35))

    assert [issue.type for issue in result.issues] == ["precision_low"]
    assert result.confidence == pytest.approx(0.9)
    assert result.is_accurate is True


async def test_placeholder_coordinates_are_suspicious(verifier: BasicAccuracyVerifier):
    result = await verifier.verify_coordinate_accuracy(LONDON_DEFAULT)

    assert [issue.type for issue in result.issues] == ["suspicious_location"]
    assert result.issues[0].description.startswith("London default coordinates")
    assert result.confidence == pytest.approx(0.7)
    assert "Verify coordinates are not placeholder values" in result.recommendations
    assert "Additional verification recommended" in result.recommendations


async def test_pending_reports_add_conflict(verifier: BasicAccuracyVerifier):
    verifier.report_location_issue(_report(PARIS))
    verifier.report_location_issue(_report(PARIS, status="rejected"))

    result = await verifier.verify_coordinate_accuracy(PARIS)

    assert [issue.type for issue in result.issues] == ["data_conflict"]
    assert result.issues[0].description == "1 accuracy issue(s) reported for this location"
    assert result.confidence == pytest.approx(0.8)
    assert result.recommendations[0] == (
        "Location has reported accuracy issues - verify manually"
    )


async def test_recorded_correction_is_replayed(verifier: BasicAccuracyVerifier):
    corrected = Coordinates(lat=51.5007, lng=-0.1246)
    await verifier.apply_coordinate_correction(
        LONDON_DEFAULT, corrected, "user_manual", 0.9, "user-1"
    )

    result = await verifier.verify_coordinate_accuracy(LONDON_DEFAULT)

    assert result.verified_coordinates == corrected
    assert result.confidence == pytest.approx(0.9)
    assert result.is_accurate is True
    assert "Using previously verified coordinates" in result.recommendations
    assert result.sources == ["validator", "correction_user_manual"]


async def test_correction_does_not_hide_critical_issue(verifier: BasicAccuracyVerifier):
    null_island = Coordinates(lat=0.0, lng=0.0)
    await verifier.apply_coordinate_correction(null_island, PARIS, "admin", 1.0)

    result = await verifier.verify_coordinate_accuracy(null_island)

    assert result.verified_coordinates == PARIS
    assert result.is_accurate is False


def test_location_reports_are_copied(verifier: BasicAccuracyVerifier):
    verifier.report_location_issue(_report(PARIS))

    reports = verifier.get_location_reports(PARIS)
    reports.clear()

    assert len(verifier.get_location_reports(PARIS)) == 1
    assert verifier.get_location_reports(LONDON_DEFAULT) == []


async def test_verification_stats(verifier: BasicAccuracyVerifier):
    verifier.report_location_issue(_report(PARIS))
    verifier.report_location_issue(_report(LONDON_DEFAULT, status="verified"))
    await verifier.apply_coordinate_correction(PARIS, LONDON_DEFAULT, "admin", 0.95)
    await verifier.verify_coordinate_accuracy(PARIS)

    assert verifier.get_verification_stats() == {
        "total_verifications": 1,
        "total_reports": 2,
        "total_corrections": 1,
        "reports_by_status": {"pending": 1, "verified": 1, "rejected": 0},
    }
