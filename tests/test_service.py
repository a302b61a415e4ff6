from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs

import httpx

from conftest import (
    CITY_GARAGE_NODE,
    LJUBLJANA,
    OVERPASS_URL,
    STREET_SIDE_WAY,
    make_service,
    overpass_payload,
)
from parking_finder.discovery.service import DiscoveryService
from parking_finder.geo import Coordinate
from parking_finder.overpass.client import OverpassClient
from parking_finder.state.models import DiscoveryPhase, FetchOutcome, ParkingType

FAR_AWAY = Coordinate(lat=46.10, lon=14.55)


def ok(*elements) -> httpx.Response:
    return httpx.Response(200, json=overpass_payload(*elements))


def test_end_to_end_publishes_normalized_spots():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return ok(CITY_GARAGE_NODE, STREET_SIDE_WAY)

    service = make_service(handler)
    started = asyncio.run(service.on_position_update(LJUBLJANA))

    assert started is True
    assert len(requests) == 1

    garage, street = service.spots
    assert garage.id == "1001"
    assert garage.name == "City Garage"
    assert garage.type == ParkingType.UNKNOWN
    assert garage.capacity == 120
    assert garage.fee is True

    assert street.id == "2002"
    assert street.name == "Parking"
    assert street.type == ParkingType.STREET
    assert (street.coordinate.lat, street.coordinate.lon) == (46.06, 14.51)

    state = service.state
    assert state.phase == DiscoveryPhase.IDLE
    assert state.last_outcome == FetchOutcome.SUCCEEDED
    assert state.error_message is None
    assert state.updated_at is not None
    assert not service.is_loading


def test_request_is_form_encoded_post():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return ok()

    service = make_service(handler, search_radius_meters=750, server_timeout_seconds=25)
    asyncio.run(service.on_position_update(LJUBLJANA))

    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == OVERPASS_URL
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    query = parse_qs(request.content.decode("ascii"))["data"][0]
    assert "[timeout:25]" in query
    assert "(around:750,46.0569,14.5058)" in query
    assert "out center;" in query


def test_elements_without_coordinates_are_dropped():
    def handler(request: httpx.Request) -> httpx.Response:
        return ok(CITY_GARAGE_NODE, {"type": "relation", "id": 5, "tags": {"amenity": "parking"}})

    service = make_service(handler)
    asyncio.run(service.on_position_update(LJUBLJANA))

    assert [s.id for s in service.spots] == ["1001"]
    assert service.error_message is None


def test_throttle_skips_small_moves_after_success():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return ok(CITY_GARAGE_NODE)

    service = make_service(handler)

    async def scenario():
        first = await service.on_position_update(LJUBLJANA)
        second = await service.on_position_update(Coordinate(lat=46.0570, lon=14.5058))
        third = await service.on_position_update(FAR_AWAY)
        return first, second, third

    assert asyncio.run(scenario()) == (True, False, True)
    assert len(calls) == 2


def test_empty_result_allows_refetch_at_same_position():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return ok()

    service = make_service(handler)

    async def scenario():
        await service.on_position_update(LJUBLJANA)
        return await service.on_position_update(LJUBLJANA)

    assert asyncio.run(scenario()) is True
    assert len(calls) == 2


def test_transport_failure_keeps_previous_spots():
    responses = iter([ok(CITY_GARAGE_NODE, STREET_SIDE_WAY), httpx.Response(504)])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    service = make_service(handler)

    async def scenario():
        await service.on_position_update(LJUBLJANA)
        await service.on_position_update(FAR_AWAY)

    asyncio.run(scenario())

    assert [s.id for s in service.spots] == ["1001", "2002"]
    assert service.error_message == "Failed to load parking data: server returned HTTP 504"
    assert service.state.last_outcome == FetchOutcome.FAILED
    assert not service.is_loading


def test_timeout_is_reported_as_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    service = make_service(handler)
    started = asyncio.run(service.on_position_update(LJUBLJANA))

    assert started is True
    assert service.spots == ()
    assert service.error_message == "Failed to load parking data: request timed out after 30s"


def test_connection_error_is_reported():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = make_service(handler)
    asyncio.run(service.on_position_update(LJUBLJANA))

    assert service.error_message == "Failed to load parking data: connection refused"


def test_malformed_response_keeps_previous_spots():
    responses = iter(
        [
            ok(CITY_GARAGE_NODE),
            httpx.Response(200, content=b"<html>rate limited</html>"),
            httpx.Response(200, json={"remark": "no elements key"}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    service = make_service(handler)

    async def scenario():
        await service.on_position_update(LJUBLJANA)
        await service.on_position_update(FAR_AWAY)
        first_error = service.error_message
        await service.on_position_update(LJUBLJANA)
        return first_error

    first_error = asyncio.run(scenario())

    assert first_error == "Failed to parse parking data."
    assert service.error_message == "Failed to parse parking data."
    assert [s.id for s in service.spots] == ["1001"]


def test_error_is_cleared_when_next_fetch_starts():
    responses = iter([httpx.Response(500), ok(CITY_GARAGE_NODE)])
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    service = make_service(handler)
    service.subscribe(seen.append)

    async def scenario():
        await service.on_position_update(LJUBLJANA)
        # Empty results, so the same position refetches
        await service.on_position_update(LJUBLJANA)

    asyncio.run(scenario())

    phases = [(s.phase, s.error_message is None) for s in seen]
    assert phases == [
        (DiscoveryPhase.FETCHING, True),
        (DiscoveryPhase.IDLE, False),
        (DiscoveryPhase.FETCHING, True),
        (DiscoveryPhase.IDLE, True),
    ]
    assert len(service.spots) == 1


def test_update_during_fetch_is_dropped():
    calls = []

    async def scenario():
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            await release.wait()
            return ok(CITY_GARAGE_NODE)

        service = make_service(handler)
        first = asyncio.create_task(service.on_position_update(LJUBLJANA))
        while not calls:
            await asyncio.sleep(0)

        assert service.is_loading
        second = await service.on_position_update(FAR_AWAY)

        release.set()
        return await first, second, service

    first, second, service = asyncio.run(scenario())

    assert first is True
    assert second is False
    assert len(calls) == 1
    assert service.state.last_fetch_location == LJUBLJANA


def test_invalid_radius_fails_without_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return ok()

    service = make_service(handler, search_radius_meters=0)
    asyncio.run(service.on_position_update(LJUBLJANA))

    assert calls == []
    assert service.error_message.startswith("Invalid search location")
    assert service.state.last_outcome == FetchOutcome.FAILED


def test_unsubscribe_stops_notifications():
    seen = []
    service = make_service(lambda request: ok())

    unsubscribe = service.subscribe(seen.append)
    unsubscribe()
    asyncio.run(service.on_position_update(LJUBLJANA))

    assert seen == []


def test_client_context_manager_closes():
    async def scenario():
        client = OverpassClient(url=OVERPASS_URL, transport=httpx.MockTransport(lambda r: ok()))
        async with client:
            assert client.is_connected
            body = await client.fetch(b"data=x")
        return client, body

    client, body = asyncio.run(scenario())

    assert not client.is_connected
    assert json.loads(body)["elements"] == []


def test_non_finite_coordinates_are_not_published():
    nan_node = {"type": "node", "id": 1, "lat": float("nan"), "lon": 14.5}
    body = json.dumps(overpass_payload(nan_node, CITY_GARAGE_NODE)).encode()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    service = make_service(handler)
    asyncio.run(service.on_position_update(LJUBLJANA))

    assert b"NaN" in body
    assert [s.id for s in service.spots] == ["1001"]
    assert service.error_message is None
    assert service.state.last_outcome == FetchOutcome.SUCCEEDED


def test_invalid_endpoint_url_is_reported_as_transport_failure():
    service = DiscoveryService(OverpassClient(url="http://[::1"))

    started = asyncio.run(service.on_position_update(LJUBLJANA))

    assert started is True
    assert service.error_message.startswith("Failed to load parking data:")
    assert service.state.last_outcome == FetchOutcome.FAILED
    assert not service.is_loading


def test_client_timeout_applies_to_each_phase():
    async def scenario():
        async with OverpassClient(url=OVERPASS_URL, timeout_seconds=12.0) as client:
            return client._client.timeout

    timeout = asyncio.run(scenario())

    assert (timeout.connect, timeout.read, timeout.write, timeout.pool) == (12.0, 12.0, 12.0, 12.0)
