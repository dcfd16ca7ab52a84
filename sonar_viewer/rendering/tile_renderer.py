"""Rasterizes one tile of sonar data into an ARGB32 strip.

Each source column spans depth ``0 .. low_limit`` from top to bottom (in
side-scan mode, ``low_limit`` either side of the centre row). When an
effective depth range is set, rows are rescaled by ``range / low_limit`` so
that every visible tile shares one vertical scale.
"""
from __future__ import annotations

import numpy as np

from sonar_viewer.model.depth_table import DepthTable
from sonar_viewer.model.display_options import DisplayOptions
from sonar_viewer.model.tiles import TileData
from sonar_viewer.rendering import palettes


class TileRenderer:
    def __init__(
        self, tile: TileData, table: DepthTable, options: DisplayOptions
    ) -> None:
        self._tile = tile
        self._table = table
        self._overlay = options.overlay
        self._color = options.color
        self._sidescan = options.sidescan
        self._range = float(options.depth_range)
        self._image: np.ndarray | None = None
        self._dirty = True
        depths = tile.depths
        self._max_depth = float(depths.max()) if depths.size else 0.0

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def offset(self) -> int:
        return self._tile.offset

    @property
    def width(self) -> int:
        return self._tile.width

    @property
    def height(self) -> int:
        return self._tile.height

    @property
    def image(self) -> np.ndarray | None:
        """Last rendered ``height x width`` uint32 ARGB raster."""
        return self._image

    @property
    def range(self) -> float:
        return self._range

    @property
    def dirty(self) -> bool:
        return self._dirty

    def is_visible(self, scroll_offset: int, viewport_width: int) -> bool:
        return (
            self.offset < scroll_offset + viewport_width
            and self.offset + self.width > scroll_offset
        )

    def is_current(self, offset: int) -> bool:
        return self.offset <= offset < self.offset + self.width

    def max_depth_area(self) -> float:
        return self._max_depth

    def map_pixel_row_to_depth(self, pixel_x: int, raw_row: int) -> int:
        """Convert a row in the tile's native scale to the rendered scale.

        ``raw_row`` is ``height * depth / low_limit``; the rendered image
        places that depth at ``height * depth / range``.
        """
        low_limit = self._table.low_limit_at(pixel_x)
        if self._range <= 0 or low_limit <= 0:
            return raw_row
        return int(raw_row * low_limit / self._range)

    # ------------------------------------------------------------------
    # Display options
    # ------------------------------------------------------------------
    def set_overlay(self, overlay: bool) -> None:
        if overlay != self._overlay:
            self._overlay = overlay
            self._dirty = True

    def set_color(self, color: str) -> None:
        if color != self._color:
            self._color = color
            self._dirty = True

    def set_sidescan(self, sidescan: bool) -> None:
        if sidescan != self._sidescan:
            self._sidescan = sidescan
            self._dirty = True

    def set_range(self, depth_range: float) -> None:
        if float(depth_range) != self._range:
            self._range = float(depth_range)
            self._dirty = True

    def apply_options(self, options: DisplayOptions) -> None:
        self.set_overlay(options.overlay)
        self.set_color(options.color)
        self.set_sidescan(options.sidescan)

    def mark_dirty(self) -> None:
        self._dirty = True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self) -> bool:
        """Rasterize if anything changed; returns whether work was done."""
        if not self._dirty and self._image is not None:
            return False

        source = self._tile.image
        height, width = source.shape
        rows = np.arange(height, dtype=np.float64)[:, None]
        ratio = self._column_ratios()[None, :]
        if self._sidescan:
            centre = height / 2.0
            src = centre + (rows - centre) * ratio
        else:
            src = rows * ratio
        src_rows = np.floor(src).astype(np.intp)
        valid = (src_rows >= 0) & (src_rows < height)
        cols = np.broadcast_to(np.arange(width), (height, width))
        values = source[np.clip(src_rows, 0, max(height - 1, 0)), cols]

        lut = palettes.palette(self._color)
        image = np.where(valid, lut[values], palettes.BACKGROUND).astype(np.uint32)
        if self._overlay and not self._sidescan:
            self._draw_depth_trace(image)

        self._image = image
        self._dirty = False
        return True

    def _column_ratios(self) -> np.ndarray:
        low_limits = self._table.low_limits(self.offset, self.width)
        if self._range <= 0:
            return np.ones(self.width, dtype=np.float64)
        ratios = np.ones(self.width, dtype=np.float64)
        known = low_limits > 0
        ratios[known] = self._range / low_limits[known]
        return ratios

    def _draw_depth_trace(self, image: np.ndarray) -> None:
        height, width = image.shape
        depths = self._table.depths(self.offset, width)
        if self._range > 0:
            scale = np.full(width, self._range)
        else:
            scale = self._table.low_limits(self.offset, width)
        drawable = (depths > 0) & (scale > 0)
        if not drawable.any():
            return
        cols = np.nonzero(drawable)[0]
        rows = (height * depths[cols] / scale[cols]).astype(np.intp)
        for delta in (-1, 0, 1):
            trace = rows + delta
            inside = (trace >= 0) & (trace < height)
            image[trace[inside], cols[inside]] = palettes.OVERLAY_COLOR
