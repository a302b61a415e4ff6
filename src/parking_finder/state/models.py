"""Data models for parking spots and discovery state."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..geo import Coordinate


class ParkingType(str, Enum):
    """Kind of parking facility. Values double as display labels."""

    SURFACE = "Surface"
    UNDERGROUND = "Underground"
    MULTI_STOREY = "Multi-Storey"
    STREET = "Street"
    UNKNOWN = "Parking"

    @property
    def label(self) -> str:
        return self.value

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def color(self) -> str:
        return _COLORS[self]

    @classmethod
    def from_tags(cls, tags: dict[str, str]) -> "ParkingType":
        """
        Classify a facility from its OSM tags.

        The ``parking`` tag is consulted first and, when present, decides on
        its own even if its value is not recognised. Only when it is missing
        does ``amenity`` get a say.
        """
        value = tags["parking"] if "parking" in tags else tags.get("amenity")
        return _TAG_VALUES.get(value, cls.UNKNOWN)


_ICONS = {
    ParkingType.SURFACE: "car.fill",
    ParkingType.UNDERGROUND: "arrow.down.to.line",
    ParkingType.MULTI_STOREY: "building.2.fill",
    ParkingType.STREET: "road.lanes",
    ParkingType.UNKNOWN: "parkingsign",
}

_COLORS = {
    ParkingType.SURFACE: "blue",
    ParkingType.UNDERGROUND: "purple",
    ParkingType.MULTI_STOREY: "orange",
    ParkingType.STREET: "green",
    ParkingType.UNKNOWN: "gray",
}

_TAG_VALUES = {
    "underground": ParkingType.UNDERGROUND,
    "multi-storey": ParkingType.MULTI_STOREY,
    "surface": ParkingType.SURFACE,
    "street_side": ParkingType.STREET,
}


class ParkingSpot(BaseModel):
    """A parking facility found near the user."""

    model_config = ConfigDict(frozen=True)

    id: str
    coordinate: Coordinate
    name: str
    type: ParkingType
    capacity: Optional[int] = None
    fee: Optional[bool] = None
    access: Optional[str] = None

    @property
    def is_restricted(self) -> bool:
        """True when access is limited (anything other than missing or "yes")."""
        return self.access is not None and self.access != "yes"

    @property
    def fee_label(self) -> Optional[str]:
        if self.fee is None:
            return None
        return "Paid" if self.fee else "Free"

    @property
    def access_label(self) -> Optional[str]:
        if not self.is_restricted:
            return None
        return self.access.capitalize()


class DiscoveryPhase(str, Enum):
    """Whether a fetch is currently running."""

    IDLE = "idle"
    FETCHING = "fetching"


class FetchOutcome(str, Enum):
    """Result of the most recent fetch."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DiscoveryState(BaseModel):
    """Snapshot of everything the display surface observes."""

    model_config = ConfigDict(frozen=True)

    spots: tuple[ParkingSpot, ...] = ()
    phase: DiscoveryPhase = DiscoveryPhase.IDLE
    last_outcome: Optional[FetchOutcome] = None
    error_message: Optional[str] = None
    last_fetch_location: Optional[Coordinate] = None
    updated_at: Optional[datetime] = None

    @property
    def is_loading(self) -> bool:
        return self.phase == DiscoveryPhase.FETCHING
