"""Location source module."""

from .tracker import AuthorizationStatus, LocationTracker, PositionFix

__all__ = ["AuthorizationStatus", "LocationTracker", "PositionFix"]
