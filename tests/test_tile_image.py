import numpy as np

from conftest import make_ping
from sonar_viewer.rendering.tile_image import build_tile_data, resample_soundings


def test_resample_stretches_by_nearest_sample():
    out = resample_soundings(b"\x0a\x14", 4)
    np.testing.assert_array_equal(out, [10, 10, 20, 20])


def test_resample_shrinks_by_nearest_sample():
    out = resample_soundings(bytes(range(8)), 4)
    np.testing.assert_array_equal(out, [0, 2, 4, 6])


def test_resample_empty_profile_is_black():
    out = resample_soundings(b"", 3)
    assert out.dtype == np.uint8
    np.testing.assert_array_equal(out, [0, 0, 0])


def test_build_tile_data_one_column_per_ping():
    pings = [
        make_ping(soundings=b"\x01\x02", depth=3.0, low_limit=10.0, temperature=8.0),
        make_ping(soundings=b"\x03\x04", depth=4.0, low_limit=12.0, temperature=9.0),
        make_ping(soundings=b"\x05\x06", depth=5.0, low_limit=14.0, temperature=10.0),
    ]

    tile = build_tile_data(pings, 2, 800)

    assert tile.offset == 800
    assert (tile.height, tile.width) == (2, 3)
    np.testing.assert_array_equal(tile.image, [[1, 3, 5], [2, 4, 6]])
    np.testing.assert_array_equal(tile.depths, [3.0, 4.0, 5.0])
    np.testing.assert_array_equal(tile.low_limits, [10.0, 12.0, 14.0])
    np.testing.assert_array_equal(tile.temps, [8.0, 9.0, 10.0])


def test_build_tile_data_without_pings():
    tile = build_tile_data([], 50, 0)
    assert tile.width == 0
    assert tile.height == 50
