"""Filtering and ordering of parking spots for list display."""

from typing import Optional, Sequence

from .geo import Coordinate, distance_meters
from .state.models import ParkingSpot


def filter_by_text(spots: Sequence[ParkingSpot], query: str) -> Sequence[ParkingSpot]:
    """
    Keep spots whose name or type label contains ``query`` (case-insensitive).

    An empty query returns ``spots`` itself.
    """
    if query == "":
        return spots

    needle = query.casefold()
    return [
        spot
        for spot in spots
        if needle in spot.name.casefold() or needle in spot.type.label.casefold()
    ]


def sort_by_distance(
    spots: Sequence[ParkingSpot],
    origin: Optional[Coordinate],
) -> list[ParkingSpot]:
    """Stable nearest-first sort; insertion order when there is no origin."""
    if origin is None:
        return list(spots)
    return sorted(spots, key=lambda spot: distance_meters(origin, spot.coordinate))


def rank_spots(
    spots: Sequence[ParkingSpot],
    query: str = "",
    origin: Optional[Coordinate] = None,
    by_distance: bool = True,
) -> list[ParkingSpot]:
    """
    Filter, then sort, spots for the list view.

    Sorting runs on the filtered subset only.
    """
    filtered = filter_by_text(spots, query)
    if by_distance:
        return sort_by_distance(filtered, origin)
    return list(filtered)


def distance_to(spot: ParkingSpot, origin: Optional[Coordinate]) -> Optional[float]:
    """Distance from origin to the spot in meters, if the origin is known."""
    if origin is None:
        return None
    return distance_meters(origin, spot.coordinate)


def format_distance(meters: float) -> str:
    """Human-readable distance: whole meters below 1 km, else km with one decimal."""
    if meters < 1000:
        return f"{meters:.0f} m"
    return f"{meters / 1000:.1f} km"
