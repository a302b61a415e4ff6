from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from parking_finder.discovery.service import DiscoveryService
from parking_finder.geo import Coordinate
from parking_finder.overpass.client import OverpassClient

OVERPASS_URL = "https://overpass.test/api/interpreter"

LJUBLJANA = Coordinate(lat=46.0569, lon=14.5058)


def overpass_payload(*elements: dict[str, Any]) -> dict[str, Any]:
    return {"version": 0.6, "generator": "Overpass API", "elements": list(elements)}


CITY_GARAGE_NODE = {
    "type": "node",
    "id": 1001,
    "lat": 46.05,
    "lon": 14.50,
    "tags": {
        "amenity": "parking",
        "name": "City Garage",
        "capacity": "120",
        "fee": "yes",
    },
}

STREET_SIDE_WAY = {
    "type": "way",
    "id": 2002,
    "center": {"lat": 46.06, "lon": 14.51},
    "tags": {"parking": "street_side"},
}


def make_service(
    handler: Callable[[httpx.Request], Any],
    **kwargs: Any,
) -> DiscoveryService:
    client = OverpassClient(url=OVERPASS_URL, transport=httpx.MockTransport(handler))
    return DiscoveryService(client, **kwargs)


@pytest.fixture
def ljubljana() -> Coordinate:
    return LJUBLJANA
