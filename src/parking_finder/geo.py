"""Coordinates and great-circle distance."""

import math

from pydantic import BaseModel, ConfigDict

EARTH_RADIUS_METERS = 6_371_000.0


class Coordinate(BaseModel):
    """A WGS84 latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lon)


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Haversine distance between two coordinates.

    Both the fetch throttle and the list sorting go through this function,
    so they always agree on how far apart two points are.

    Args:
        a, b: Coordinates to measure between

    Returns:
        Distance in meters
    """
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat))
        * math.cos(math.radians(b.lat))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
