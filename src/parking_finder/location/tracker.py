"""Position source binding with authorization and accuracy gating."""

import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..geo import Coordinate, distance_meters
from ..metrics import record_location_fix

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Location access denied. Please enable it in Settings."


class AuthorizationStatus(str, Enum):
    """Location permission as reported by the device."""

    NOT_DETERMINED = "not_determined"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"
    AUTHORIZED_ALWAYS = "authorized_always"
    DENIED = "denied"
    RESTRICTED = "restricted"


class PositionFix(BaseModel):
    """A single reading from the location sensor."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    horizontal_accuracy: float = Field(ge=0)  # Radius of uncertainty in meters
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.latitude, lon=self.longitude)


LocationCallback = Callable[[PositionFix], Awaitable[object]]


class LocationTracker:
    """
    Tracks the user's position and forwards qualifying fixes.

    Fixes are only accepted while updates are running, which in turn only
    happens once location access has been authorized. Of every batch the
    latest fix is taken; it is dropped if its accuracy is too poor or if it
    lies within the distance filter of the last accepted position.
    """

    def __init__(
        self,
        max_horizontal_accuracy_meters: float = 100.0,
        distance_filter_meters: float = 20.0,
        on_location: Optional[LocationCallback] = None,
    ):
        """
        Initialize the tracker.

        Args:
            max_horizontal_accuracy_meters: Fixes at or above this accuracy are ignored
            distance_filter_meters: Minimum movement between accepted fixes
            on_location: Coroutine called with every accepted fix
        """
        self.max_horizontal_accuracy_meters = max_horizontal_accuracy_meters
        self.distance_filter_meters = distance_filter_meters
        self.on_location = on_location

        self.location: Optional[PositionFix] = None
        self.authorization_status = AuthorizationStatus.NOT_DETERMINED
        self.error_message: Optional[str] = None
        self.permission_requested = False
        self._updating = False

    @property
    def is_updating(self) -> bool:
        return self._updating

    def request_permission(self) -> None:
        """Ask for when-in-use access; the answer arrives via change_authorization."""
        self.permission_requested = True
        logger.info("Requesting location permission")

    def start_updating(self) -> None:
        self._updating = True
        logger.info("Location updates started")

    def stop_updating(self) -> None:
        self._updating = False
        logger.info("Location updates stopped")

    def change_authorization(self, status: AuthorizationStatus) -> None:
        """Apply a new authorization status."""
        self.authorization_status = status
        logger.info(f"Location authorization: {status.value}")

        if status in (
            AuthorizationStatus.AUTHORIZED_WHEN_IN_USE,
            AuthorizationStatus.AUTHORIZED_ALWAYS,
        ):
            self.error_message = None
            self.start_updating()
        elif status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            self.stop_updating()
            self.error_message = ACCESS_DENIED_MESSAGE
        else:
            self.request_permission()

    def fail(self, message: str) -> None:
        """Record an error reported by the sensor."""
        logger.warning(f"Location error: {message}")
        self.error_message = message

    async def update(self, fixes: Sequence[PositionFix]) -> Optional[PositionFix]:
        """
        Handle a batch of fixes from the sensor.

        Args:
            fixes: Fixes in chronological order

        Returns:
            The accepted fix, or None if the batch was ignored
        """
        if not fixes or not self._updating:
            return None

        latest = fixes[-1]

        if latest.horizontal_accuracy >= self.max_horizontal_accuracy_meters:
            logger.debug(f"Ignoring fix with accuracy {latest.horizontal_accuracy:.0f}m")
            record_location_fix("inaccurate")
            return None

        if self.location is not None and (
            distance_meters(self.location.coordinate, latest.coordinate)
            < self.distance_filter_meters
        ):
            record_location_fix("filtered")
            return None

        self.location = latest
        record_location_fix("accepted")

        if self.on_location is not None:
            await self.on_location(latest)

        return latest
