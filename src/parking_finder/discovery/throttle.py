"""Movement-gated fetch throttling."""

from typing import Optional

from ..geo import Coordinate, distance_meters


def should_fetch(
    current: Coordinate,
    last: Optional[Coordinate],
    has_existing_results: bool,
    min_distance_meters: float,
) -> bool:
    """
    Decide whether a position update warrants a new fetch.

    A fetch is skipped only when we have fetched before, have not moved at
    least ``min_distance_meters`` since, and still hold results from that
    fetch. The first fix, and any fix after an empty result, always fetches.
    """
    if last is None or not has_existing_results:
        return True
    return distance_meters(current, last) >= min_distance_meters


class FetchThrottle:
    """Holds the refetch threshold for a discovery service."""

    def __init__(self, min_distance_meters: float = 300.0):
        self.min_distance_meters = min_distance_meters

    def should_fetch(
        self,
        current: Coordinate,
        last: Optional[Coordinate],
        has_existing_results: bool,
    ) -> bool:
        return should_fetch(current, last, has_existing_results, self.min_distance_meters)
