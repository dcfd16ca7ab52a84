import pytest

from sonar_viewer.model.tiles import aligned_offset, tile_starts


@pytest.mark.parametrize("offset, expected", [(0, 0), (399, 0), (400, 400), (450, 400), (1234, 1200)])
def test_aligned_offset(offset, expected):
    assert aligned_offset(offset, 400) == expected


@pytest.mark.parametrize("offset", [0, 17, 400, 799, 12345])
def test_alignment_is_idempotent(offset):
    once = aligned_offset(offset, 400)
    assert aligned_offset(once, 400) == once
    assert once % 400 == 0
    assert once <= offset < once + 400


def test_tile_starts_cover_viewport_plus_one_tile():
    assert tile_starts(450, 1000, 400) == [400, 800, 1200, 1600]
    assert tile_starts(0, 300, 100) == [0, 100, 200, 300]
