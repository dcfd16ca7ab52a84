from __future__ import annotations

import numpy as np

from sonar_viewer.model.depth_table import DepthTable
from sonar_viewer.model.display_options import DisplayOptions
from sonar_viewer.model.tiles import TileData
from sonar_viewer.rendering import palettes
from sonar_viewer.rendering.tile_renderer import TileRenderer


def _tile(offset: int, column, *, width: int = 1, depth: float = 0.0, low_limit: float = 10.0) -> TileData:
    image = np.repeat(np.asarray(column, dtype=np.uint8)[:, None], width, axis=1)
    return TileData(
        offset=offset,
        image=image,
        low_limits=np.full(width, low_limit),
        depths=np.full(width, depth),
        temps=np.zeros(width),
    )


def _renderer(tile: TileData, options: DisplayOptions | None = None) -> TileRenderer:
    table = DepthTable()
    table.append_low_limit(tile.low_limits, tile.offset)
    table.append_depth(tile.depths, tile.offset)
    table.append_temp(tile.temps, tile.offset)
    return TileRenderer(tile, table, options or DisplayOptions())


def _gray(value: int) -> int:
    return int(palettes.palette("grayscale")[value])


def test_visibility_and_current_offset():
    renderer = _renderer(_tile(400, [0, 0], width=400))

    assert renderer.is_visible(0, 1000)
    assert renderer.is_visible(799, 100)
    assert not renderer.is_visible(800, 100)
    assert not renderer.is_visible(0, 400)
    assert renderer.is_current(400)
    assert renderer.is_current(799)
    assert not renderer.is_current(800)


def test_max_depth_area():
    tile = _tile(0, [0], width=3)
    tile = TileData(tile.offset, tile.image, tile.low_limits, np.array([3.0, 7.8, 5.0]), tile.temps)
    assert _renderer(tile).max_depth_area() == 7.8


def test_native_scale_without_range():
    renderer = _renderer(_tile(0, [10, 20, 30, 40]))

    assert renderer.render()

    assert renderer.image.dtype == np.uint32
    assert [int(v) for v in renderer.image[:, 0]] == [_gray(v) for v in (10, 20, 30, 40)]


def test_range_deeper_than_low_limit_compresses_column():
    renderer = _renderer(_tile(0, [10, 20, 30, 40], low_limit=10.0))
    renderer.set_range(20.0)

    renderer.render()

    column = [int(v) for v in renderer.image[:, 0]]
    background = int(palettes.BACKGROUND)
    assert column == [_gray(10), _gray(30), background, background]


def test_sidescan_scales_around_centre_row():
    renderer = _renderer(
        _tile(0, [10, 20, 30, 40], low_limit=10.0),
        DisplayOptions(sidescan=True, depth_range=20.0),
    )

    renderer.render()

    column = [int(v) for v in renderer.image[:, 0]]
    background = int(palettes.BACKGROUND)
    assert column == [background, _gray(10), _gray(30), background]


def test_overlay_draws_depth_trace():
    renderer = _renderer(
        _tile(0, [0] * 10, depth=5.0, low_limit=10.0), DisplayOptions(overlay=True)
    )

    renderer.render()

    column = [int(v) for v in renderer.image[:, 0]]
    overlay = int(palettes.OVERLAY_COLOR)
    assert [row for row, value in enumerate(column) if value == overlay] == [4, 5, 6]


def test_overlay_is_not_drawn_in_sidescan():
    renderer = _renderer(
        _tile(0, [0] * 10, depth=5.0, low_limit=10.0),
        DisplayOptions(overlay=True, sidescan=True),
    )

    renderer.render()

    assert int(palettes.OVERLAY_COLOR) not in renderer.image


def test_render_only_when_dirty():
    renderer = _renderer(_tile(0, [1, 2]))

    assert renderer.render()
    assert not renderer.dirty
    assert not renderer.render()

    renderer.set_range(0.0)
    renderer.set_color("grayscale")
    assert not renderer.dirty

    renderer.set_color("amber")
    assert renderer.dirty
    assert renderer.render()


def test_setters_mark_dirty():
    renderer = _renderer(_tile(0, [1, 2]))
    renderer.render()

    renderer.set_overlay(True)
    assert renderer.dirty
    renderer.render()

    renderer.set_sidescan(True)
    assert renderer.dirty
    renderer.render()

    renderer.set_range(12.0)
    assert renderer.dirty
    assert renderer.range == 12.0


def test_map_pixel_row_to_depth():
    renderer = _renderer(_tile(0, [0, 0], low_limit=10.0))

    assert renderer.map_pixel_row_to_depth(0, 50) == 50
    renderer.set_range(20.0)
    assert renderer.map_pixel_row_to_depth(0, 50) == 25
    # no low limit recorded for this pixel
    assert renderer.map_pixel_row_to_depth(5, 50) == 50


def test_unknown_palette_falls_back_to_grayscale():
    assert np.array_equal(palettes.palette("nope"), palettes.palette("grayscale"))
