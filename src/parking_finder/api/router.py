"""FastAPI route definitions."""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from fastapi import APIRouter, HTTPException, Response

from ..discovery.service import DiscoveryService
from ..geo import Coordinate
from ..location.tracker import LocationTracker, PositionFix
from ..metrics import get_metrics
from ..ranking import distance_to, format_distance, rank_spots
from ..state.models import ParkingSpot, ParkingType
from .schemas import (
    AuthorizationUpdate,
    HealthResponse,
    LegendEntry,
    PositionResponse,
    PositionUpdate,
    SpotResponse,
    SpotsResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies injected at startup
_service: Optional[DiscoveryService] = None
_tracker: Optional[LocationTracker] = None
_start_time: datetime = datetime.now()


class SortOrder(str, Enum):
    DISTANCE = "distance"
    NONE = "none"


def init_router(service: DiscoveryService, tracker: LocationTracker) -> None:
    """
    Initialize router with dependencies.

    Args:
        service: DiscoveryService holding the published spots
        tracker: LocationTracker providing the user's position
    """
    global _service, _tracker, _start_time

    _service = service
    _tracker = tracker
    _start_time = datetime.now()

    logger.info("API router initialized")


def _require_service() -> tuple[DiscoveryService, LocationTracker]:
    if _service is None or _tracker is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _service, _tracker


def _origin() -> Optional[Coordinate]:
    if _tracker is None or _tracker.location is None:
        return None
    return _tracker.location.coordinate


def _spot_response(spot: ParkingSpot, origin: Optional[Coordinate]) -> SpotResponse:
    distance = distance_to(spot, origin)
    return SpotResponse(
        id=spot.id,
        name=spot.name,
        type=spot.type,
        icon=spot.type.icon,
        color=spot.type.color,
        latitude=spot.coordinate.lat,
        longitude=spot.coordinate.lon,
        capacity=spot.capacity,
        fee=spot.fee,
        fee_label=spot.fee_label,
        access=spot.access,
        access_label=spot.access_label,
        distance_m=distance,
        distance_label=format_distance(distance) if distance is not None else None,
    )


def _status_response(service: DiscoveryService, tracker: LocationTracker) -> StatusResponse:
    state = service.state
    last = state.last_fetch_location
    return StatusResponse(
        is_loading=state.is_loading,
        phase=state.phase,
        last_outcome=state.last_outcome,
        # Discovery errors take precedence over location errors
        error_message=state.error_message or tracker.error_message,
        spot_count=len(state.spots),
        last_fetch_latitude=last.lat if last else None,
        last_fetch_longitude=last.lon if last else None,
        last_update=state.updated_at,
        authorization_status=tracker.authorization_status,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health information about the service.
    """
    uptime = (datetime.now() - _start_time).total_seconds()

    return HealthResponse(
        status="healthy" if _service is not None else "starting",
        has_location=_origin() is not None,
        uptime_seconds=uptime,
    )


@router.get("/status", response_model=StatusResponse)
async def get_status() -> StatusResponse:
    """
    Get discovery status.

    Returns whether a fetch is running, the last error and how many spots
    are currently published.
    """
    service, tracker = _require_service()
    return _status_response(service, tracker)


@router.get("/spots", response_model=SpotsResponse)
async def list_spots(q: str = "", sort: SortOrder = SortOrder.DISTANCE) -> SpotsResponse:
    """
    List nearby parking spots.

    Args:
        q: Case-insensitive text matched against name and type
        sort: "distance" for nearest first, "none" for server order
    """
    service, _ = _require_service()
    origin = _origin()

    ranked = rank_spots(
        service.spots,
        query=q,
        origin=origin,
        by_distance=sort == SortOrder.DISTANCE,
    )

    return SpotsResponse(
        total=len(ranked),
        query=q,
        sorted_by_distance=sort == SortOrder.DISTANCE and origin is not None,
        spots=[_spot_response(spot, origin) for spot in ranked],
    )


@router.get("/spots/{spot_id}", response_model=SpotResponse)
async def get_spot(spot_id: str) -> SpotResponse:
    """
    Get a specific parking spot.

    Args:
        spot_id: The OSM element ID of the spot
    """
    service, _ = _require_service()

    spot = next((s for s in service.spots if s.id == spot_id), None)
    if spot is None:
        raise HTTPException(status_code=404, detail=f"Spot '{spot_id}' not found")

    return _spot_response(spot, _origin())


@router.get("/legend", response_model=list[LegendEntry])
async def get_legend() -> list[LegendEntry]:
    """Display label, icon and color of every parking type."""
    return [
        LegendEntry(type=t, label=t.label, icon=t.icon, color=t.color)
        for t in ParkingType
    ]


@router.post("/location", response_model=PositionResponse)
async def push_location(update: PositionUpdate) -> PositionResponse:
    """
    Feed a position fix from the device.

    Accepted fixes are forwarded to discovery; the response reports whether
    that started a fetch.
    """
    service, tracker = _require_service()

    fix = PositionFix(
        latitude=update.latitude,
        longitude=update.longitude,
        horizontal_accuracy=update.horizontal_accuracy,
        timestamp=update.timestamp or datetime.now(),
    )

    fetch_started = False

    def watch(state) -> None:
        nonlocal fetch_started
        if state.is_loading:
            fetch_started = True

    unsubscribe = service.subscribe(watch)
    try:
        accepted = await tracker.update([fix])
    finally:
        unsubscribe()

    return PositionResponse(
        accepted=accepted is not None,
        fetch_started=fetch_started,
        status=_status_response(service, tracker),
    )


@router.post("/location/authorization", response_model=StatusResponse)
async def set_authorization(update: AuthorizationUpdate) -> StatusResponse:
    """Report a change of location permission."""
    service, tracker = _require_service()
    tracker.change_authorization(update.status)
    return _status_response(service, tracker)


@router.post("/refresh", response_model=StatusResponse)
async def refresh() -> StatusResponse:
    """
    Re-run discovery at the current location.

    The movement throttle still applies, so this only fetches when results
    are empty or the user has moved far enough.
    """
    service, tracker = _require_service()

    origin = _origin()
    if origin is None:
        raise HTTPException(status_code=409, detail="No location available yet")

    await service.on_position_update(origin)
    return _status_response(service, tracker)


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - parking_fetches_total: Fetches by outcome
    - parking_fetches_skipped_total: Position updates that did not fetch
    - parking_fetch_latency_seconds: Histogram of fetch latency
    - parking_records_dropped_total: Elements without a coordinate
    - parking_spots_published: Spots in the current result set
    - parking_location_fixes_total: Position fixes by result
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
