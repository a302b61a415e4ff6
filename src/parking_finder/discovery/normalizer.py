"""Conversion of raw Overpass elements into parking spots."""

import logging
import re
from typing import Iterable, Optional

from ..geo import Coordinate
from ..metrics import record_dropped_records
from ..overpass.models import RawGeoRecord
from ..state.models import ParkingSpot, ParkingType

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Parking"

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _resolve_coordinate(record: RawGeoRecord) -> Optional[Coordinate]:
    """Direct position for nodes, centroid for ways and relations."""
    if record.lat is not None and record.lon is not None:
        coordinate = Coordinate(lat=record.lat, lon=record.lon)
        if coordinate.is_finite:
            return coordinate
    if record.center is not None:
        coordinate = Coordinate(lat=record.center.lat, lon=record.center.lon)
        if coordinate.is_finite:
            return coordinate
    return None


def _parse_capacity(value: Optional[str]) -> Optional[int]:
    # OSM capacity values are free text ("120", "approx 50", "yes"); only
    # plain non-negative integers are taken.
    if value is None or not _INTEGER.fullmatch(value):
        return None
    capacity = int(value)
    return capacity if capacity >= 0 else None


def normalize(record: RawGeoRecord) -> Optional[ParkingSpot]:
    """
    Convert a raw Overpass element into a ParkingSpot.

    Args:
        record: Element from an Overpass response

    Returns:
        ParkingSpot, or None if the element has no usable coordinate
    """
    coordinate = _resolve_coordinate(record)
    if coordinate is None:
        return None

    tags = record.tags or {}
    fee = tags.get("fee")

    return ParkingSpot(
        id=str(record.element_id),
        coordinate=coordinate,
        name=tags.get("name") or tags.get("operator") or DEFAULT_NAME,
        type=ParkingType.from_tags(tags),
        capacity=_parse_capacity(tags.get("capacity")),
        fee=None if fee is None else fee != "no",
        access=tags.get("access"),
    )


def normalize_all(records: Iterable[RawGeoRecord]) -> list[ParkingSpot]:
    """Normalize a batch of records, dropping the ones without a coordinate."""
    spots = []
    dropped = 0

    for record in records:
        spot = normalize(record)
        if spot is None:
            dropped += 1
            logger.debug(f"Dropping {record.kind} {record.element_id}: no coordinate")
            continue
        spots.append(spot)

    record_dropped_records(dropped)
    return spots
