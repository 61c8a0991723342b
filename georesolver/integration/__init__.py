"""Trip planning integration for the coordinate resolver."""

from georesolver.integration.service import (
    CoordinateIntegrationService,
    Outcome,
    get_integration_service,
)

__all__ = [
    "CoordinateIntegrationService",
    "Outcome",
    "get_integration_service",
]
