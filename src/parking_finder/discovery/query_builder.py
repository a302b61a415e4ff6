"""Overpass QL query construction."""

import math
from urllib.parse import urlencode

from ..errors import InvalidQueryInput
from ..geo import Coordinate

# Element kinds that may carry an amenity=parking tag
ELEMENT_KINDS = ("node", "way", "relation")


class GeoQueryBuilder:
    """
    Builds Overpass queries for parking amenities around a point.

    Ways and relations are requested with ``out center`` so the server
    reports a single centroid instead of the full outline.
    """

    def __init__(self, server_timeout_seconds: int = 25):
        self.server_timeout_seconds = server_timeout_seconds

    def build(self, center: Coordinate, radius_meters: int) -> str:
        """
        Build the query string.

        Args:
            center: Search center
            radius_meters: Search radius around the center

        Returns:
            Overpass QL query

        Raises:
            InvalidQueryInput: If the center is not finite or the radius is not positive
        """
        if not center.is_finite:
            raise InvalidQueryInput(f"non-finite coordinate ({center.lat}, {center.lon})")
        if isinstance(radius_meters, bool) or not isinstance(radius_meters, int):
            raise InvalidQueryInput(f"radius must be an integer, got {radius_meters!r}")
        if radius_meters <= 0:
            raise InvalidQueryInput(f"radius must be positive, got {radius_meters}")

        around = f"(around:{radius_meters},{center.lat},{center.lon})"
        lines = [f"[out:json][timeout:{self.server_timeout_seconds}];", "("]
        lines.extend(f'  {kind}["amenity"="parking"]{around};' for kind in ELEMENT_KINDS)
        lines.extend([");", "out center;"])
        return "\n".join(lines)

    @staticmethod
    def encode_form_body(query: str) -> bytes:
        """Percent-encode a query as an x-www-form-urlencoded ``data=`` body."""
        return urlencode({"data": query}).encode("utf-8")
