"""Parking discovery pipeline."""

from .normalizer import normalize, normalize_all
from .query_builder import GeoQueryBuilder
from .service import DiscoveryService
from .throttle import FetchThrottle, should_fetch

__all__ = [
    "DiscoveryService",
    "FetchThrottle",
    "GeoQueryBuilder",
    "normalize",
    "normalize_all",
    "should_fetch",
]
