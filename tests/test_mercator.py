import math

import pytest

from sonar_core.mercator import (
    EARTH_RADIUS,
    latitude_to_mercator,
    longitude_to_mercator,
    to_latitude,
    to_longitude,
)


def test_zero_maps_to_null_island():
    assert to_longitude(0) == 0.0
    assert to_latitude(0) == 0.0


def test_longitude_is_linear_in_polar_radius():
    assert to_longitude(EARTH_RADIUS * math.pi / 180.0) == pytest.approx(1.0)


@pytest.mark.parametrize("latitude, longitude", [(59.3293, 18.0686), (-33.86, 151.21)])
def test_encode_then_decode_recovers_position(latitude, longitude):
    assert to_latitude(latitude_to_mercator(latitude)) == pytest.approx(latitude)
    assert to_longitude(longitude_to_mercator(longitude)) == pytest.approx(longitude)


def test_southern_latitudes_are_negative():
    assert to_latitude(-1_000_000) < 0 < to_latitude(1_000_000)
