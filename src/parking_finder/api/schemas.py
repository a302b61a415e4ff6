"""API request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..location.tracker import AuthorizationStatus
from ..state.models import DiscoveryPhase, FetchOutcome, ParkingType


class SpotResponse(BaseModel):
    """Response schema for a single parking spot."""

    id: str
    name: str
    type: ParkingType
    icon: str
    color: str
    latitude: float
    longitude: float
    capacity: Optional[int] = None
    fee: Optional[bool] = None
    fee_label: Optional[str] = None
    access: Optional[str] = None
    access_label: Optional[str] = None
    distance_m: Optional[float] = None
    distance_label: Optional[str] = None


class SpotsResponse(BaseModel):
    """Response schema for the parking list."""

    total: int
    query: str
    sorted_by_distance: bool
    spots: list[SpotResponse]


class StatusResponse(BaseModel):
    """Response schema for discovery status."""

    is_loading: bool
    phase: DiscoveryPhase
    last_outcome: Optional[FetchOutcome] = None
    error_message: Optional[str] = None
    spot_count: int
    last_fetch_latitude: Optional[float] = None
    last_fetch_longitude: Optional[float] = None
    last_update: Optional[datetime] = None
    authorization_status: AuthorizationStatus


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    has_location: bool
    uptime_seconds: float


class LegendEntry(BaseModel):
    """Display attributes of a parking type."""

    type: ParkingType
    label: str
    icon: str
    color: str


class PositionUpdate(BaseModel):
    """Position fix pushed by a client."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    horizontal_accuracy: float = Field(ge=0)
    timestamp: Optional[datetime] = None


class PositionResponse(BaseModel):
    """Result of a pushed position fix."""

    accepted: bool
    fetch_started: bool
    status: StatusResponse


class AuthorizationUpdate(BaseModel):
    """Location permission change pushed by a client."""

    status: AuthorizationStatus
