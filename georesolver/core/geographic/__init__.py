"""Verified destination registry and its persistence."""

from georesolver.core.geographic.manager import (
    GeographicDataManager,
    generate_destination_id,
)
from georesolver.core.geographic.store import DestinationStore

__all__ = [
    "DestinationStore",
    "GeographicDataManager",
    "generate_destination_id",
]
