"""Parking discovery orchestration."""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from ..errors import DiscoveryError
from ..geo import Coordinate
from ..metrics import record_fetch, record_fetch_skipped, update_spot_count
from ..overpass.client import OverpassClient
from ..overpass.models import decode_response
from ..state.models import DiscoveryPhase, DiscoveryState, FetchOutcome, ParkingSpot
from .normalizer import normalize_all
from .query_builder import GeoQueryBuilder
from .throttle import FetchThrottle

logger = logging.getLogger(__name__)

StateListener = Callable[[DiscoveryState], None]


class DiscoveryService:
    """
    Fetches parking spots around the user as they move.

    Each position update runs through the throttle; accepted updates build an
    Overpass query, fetch it, normalize the elements and publish the result.
    Everything observable lives in one immutable DiscoveryState that is
    swapped out in a single assignment, so readers see either the old or the
    new collection and never a mix.

    Only one fetch runs at a time. Updates that arrive while a fetch is in
    flight are dropped, not queued.
    """

    def __init__(
        self,
        client: OverpassClient,
        search_radius_meters: int = 1000,
        min_refetch_distance_meters: float = 300.0,
        server_timeout_seconds: int = 25,
    ):
        """
        Initialize the discovery service.

        Args:
            client: Transport used for Overpass requests
            search_radius_meters: Radius of the parking query
            min_refetch_distance_meters: Movement needed before refetching
            server_timeout_seconds: Timeout hint embedded in the query
        """
        self.client = client
        self.search_radius_meters = search_radius_meters
        self.query_builder = GeoQueryBuilder(server_timeout_seconds=server_timeout_seconds)
        self.throttle = FetchThrottle(min_distance_meters=min_refetch_distance_meters)

        self._state = DiscoveryState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> DiscoveryState:
        """Current published state."""
        return self._state

    @property
    def spots(self) -> tuple[ParkingSpot, ...]:
        return self._state.spots

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error_message(self) -> Optional[str]:
        return self._state.error_message

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with every new state.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: DiscoveryState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    async def on_position_update(self, location: Coordinate) -> bool:
        """
        React to a new position fix.

        Args:
            location: Current user position

        Returns:
            True if a fetch was started for this update
        """
        state = self._state

        if state.phase == DiscoveryPhase.FETCHING:
            logger.debug("Fetch already in flight, ignoring position update")
            record_fetch_skipped("in_flight")
            return False

        if not self.throttle.should_fetch(
            location, state.last_fetch_location, bool(state.spots)
        ):
            logger.debug(
                f"Moved less than {self.throttle.min_distance_meters:g}m since last fetch, skipping"
            )
            record_fetch_skipped("throttled")
            return False

        self._publish(
            state.model_copy(
                update={
                    "phase": DiscoveryPhase.FETCHING,
                    "error_message": None,
                    "last_fetch_location": location,
                }
            )
        )

        logger.info(
            f"Fetching parking within {self.search_radius_meters}m of "
            f"({location.lat:.5f}, {location.lon:.5f})"
        )
        start = time.perf_counter()

        try:
            spots = await self._fetch(location)
        except DiscoveryError as e:
            logger.warning(f"Parking fetch failed: {e}")
            record_fetch("failed", time.perf_counter() - start)
            self._fail(e.user_message)
            return True
        except Exception:
            logger.exception("Unexpected error during parking fetch")
            record_fetch("failed", time.perf_counter() - start)
            self._fail("Failed to load parking data.")
            return True

        record_fetch("succeeded", time.perf_counter() - start)
        update_spot_count(len(spots))
        logger.info(f"Published {len(spots)} parking spot(s)")

        self._publish(
            self._state.model_copy(
                update={
                    "spots": tuple(spots),
                    "phase": DiscoveryPhase.IDLE,
                    "last_outcome": FetchOutcome.SUCCEEDED,
                    "error_message": None,
                    "updated_at": datetime.now(),
                }
            )
        )
        return True

    async def _fetch(self, location: Coordinate) -> list[ParkingSpot]:
        query = self.query_builder.build(location, self.search_radius_meters)
        payload = await self.client.fetch(self.query_builder.encode_form_body(query))
        records = decode_response(payload)
        return normalize_all(records)

    def _fail(self, message: str) -> None:
        # Keep the previous spots so the UI shows stale data, not nothing
        self._publish(
            self._state.model_copy(
                update={
                    "phase": DiscoveryPhase.IDLE,
                    "last_outcome": FetchOutcome.FAILED,
                    "error_message": message,
                }
            )
        )
