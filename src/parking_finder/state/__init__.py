"""State management module."""

from .models import (
    DiscoveryPhase,
    DiscoveryState,
    FetchOutcome,
    ParkingSpot,
    ParkingType,
)

__all__ = ["DiscoveryPhase", "DiscoveryState", "FetchOutcome", "ParkingSpot", "ParkingType"]
