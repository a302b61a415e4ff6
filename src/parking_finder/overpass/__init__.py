"""Overpass API access module."""

from .client import OverpassClient
from .models import OverpassResponse, RawGeoRecord, decode_response

__all__ = ["OverpassClient", "OverpassResponse", "RawGeoRecord", "decode_response"]
