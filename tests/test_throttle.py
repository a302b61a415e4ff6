from __future__ import annotations

import pytest

from parking_finder.discovery.throttle import FetchThrottle, should_fetch
from parking_finder.geo import Coordinate, distance_meters

P = Coordinate(lat=46.0569, lon=14.5058)
# ~111 m north of P
NEAR = Coordinate(lat=46.0579, lon=14.5058)
# ~1.1 km north of P
FAR = Coordinate(lat=46.0669, lon=14.5058)


def test_same_position_with_results_is_skipped():
    assert should_fetch(P, P, True, 300) is False


@pytest.mark.parametrize("has_results", [True, False])
def test_first_fix_always_fetches(has_results):
    assert should_fetch(FAR, None, has_results, 300) is True


def test_small_move_with_results_is_skipped():
    assert should_fetch(NEAR, P, True, 300) is False


def test_small_move_without_results_fetches():
    assert should_fetch(NEAR, P, False, 300) is True


def test_large_move_fetches():
    assert should_fetch(FAR, P, True, 300) is True


def test_threshold_is_strictly_less_than():
    distance = distance_meters(NEAR, P)

    assert should_fetch(NEAR, P, True, distance) is True
    assert should_fetch(NEAR, P, True, distance + 0.001) is False


def test_throttle_uses_configured_threshold():
    throttle = FetchThrottle(min_distance_meters=50)

    assert throttle.should_fetch(NEAR, P, True) is True
    assert FetchThrottle().should_fetch(NEAR, P, True) is False


def test_distance_is_symmetric_and_plausible():
    d = distance_meters(P, FAR)

    assert d == pytest.approx(distance_meters(FAR, P))
    assert d == pytest.approx(1112, rel=0.01)
    assert distance_meters(P, P) == 0
