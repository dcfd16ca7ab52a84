"""Scroll-driven tile scheduling and pointer readouts for the sonar view.

The controller owns the tile dedup set and the renderers, knows nothing
about Qt, and talks to the outside world through three callables:
``fetch_tile(height, tile_width, start)`` issues an asynchronous tile
request, ``on_repaint()`` asks the view to repaint, and ``on_click(x)``
reports a click at logical pixel ``x``. Tile results come back through
:meth:`tile_loaded` / :meth:`tile_failed` on the same thread.
"""
from __future__ import annotations

from bisect import bisect_right, insort
from dataclasses import dataclass
import logging
from typing import Callable, Dict, List, Optional, Tuple

from sonar_viewer.model.depth_table import DepthTable
from sonar_viewer.model.display_options import DisplayOptions
from sonar_viewer.model.tiles import DEFAULT_TILE_WIDTH, TileData, tile_starts
from sonar_viewer.rendering.tile_renderer import TileRenderer

logger = logging.getLogger(__name__)

FetchTile = Callable[[int, int, int], None]


@dataclass(frozen=True)
class CursorReadout:
    x: int
    y: int
    depth: float
    cursor: float
    temperature: float


@dataclass(frozen=True)
class RulerMarker:
    screen_x: int
    height: int
    marker_row: Optional[int]


class SonarViewportController:
    def __init__(
        self,
        fetch_tile: FetchTile,
        *,
        tile_width: int = DEFAULT_TILE_WIDTH,
        options: DisplayOptions | None = None,
        on_repaint: Callable[[], None] | None = None,
        on_click: Callable[[int], None] | None = None,
    ) -> None:
        if tile_width <= 0:
            raise ValueError(f"tile width must be positive, got {tile_width}")
        self._fetch_tile = fetch_tile
        self._tile_width = tile_width
        self._options = options or DisplayOptions()
        self._on_repaint = on_repaint
        self._on_click = on_click

        self._table: DepthTable | None = None
        self._total_width: int | None = None
        self._requested: set[int] = set()
        self._failed: set[int] = set()
        self._starts: List[int] = []
        self._renderers: Dict[int, TileRenderer] = {}

        self._scroll = 0
        self._viewport_width = 0
        self._viewport_height = 0
        self._effective_range = 0.0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def tile_width(self) -> int:
        return self._tile_width

    @property
    def table(self) -> DepthTable | None:
        return self._table

    @property
    def total_width(self) -> int | None:
        return self._total_width

    @property
    def options(self) -> DisplayOptions:
        return self._options

    @property
    def scroll_offset(self) -> int:
        return self._scroll

    @property
    def viewport_size(self) -> Tuple[int, int]:
        return self._viewport_width, self._viewport_height

    @property
    def effective_range(self) -> float:
        return self._effective_range

    @property
    def requested_offsets(self) -> frozenset[int]:
        return frozenset(self._requested)

    @property
    def failed_offsets(self) -> frozenset[int]:
        return frozenset(self._failed)

    @property
    def renderers(self) -> List[TileRenderer]:
        return [self._renderers[start] for start in self._starts]

    def visible_renderers(self, offset: int | None = None) -> List[TileRenderer]:
        scroll = self._scroll if offset is None else offset
        return [
            renderer
            for renderer in self.renderers
            if renderer.is_visible(scroll, self._viewport_width)
        ]

    # ------------------------------------------------------------------
    # Layout and scrolling
    # ------------------------------------------------------------------
    def initialize(self, total_width: int) -> None:
        """Record the log's pixel width and create the depth table once."""
        if self._total_width is not None:
            return
        self._total_width = total_width
        if self._table is None:
            self._table = DepthTable(total_width)
        logger.info("Viewport initialized: total_width=%s tile_width=%s", total_width, self._tile_width)

    def set_viewport_size(self, width: int, height: int) -> None:
        self._viewport_width = max(width, 0)
        self._viewport_height = max(height, 0)
        if self._viewport_width > 0 and not self._requested:
            self.fetch_tiles(0)

    def on_scroll(self, offset: int) -> None:
        self._scroll = offset
        self.fetch_tiles(offset)
        self.render(offset)

    def fetch_tiles(self, offset: int) -> List[int]:
        """Request every not-yet-requested tile covering ``offset``."""
        issued: List[int] = []
        for start in tile_starts(offset, self._viewport_width, self._tile_width):
            if start in self._requested:
                continue
            if self._total_width is not None and start >= self._total_width:
                continue
            self._requested.add(start)
            issued.append(start)
            logger.debug("Requesting tile %s (height=%s)", start, self._viewport_height)
            self._fetch_tile(self._viewport_height, self._tile_width, start)
        return issued

    # ------------------------------------------------------------------
    # Fetch completion
    # ------------------------------------------------------------------
    def tile_loaded(self, tile: TileData) -> None:
        if self._table is None:
            # total width stays unknown until initialize()
            self._table = DepthTable(tile.offset + tile.width)
        self._table.append_low_limit(tile.low_limits, tile.offset)
        self._table.append_depth(tile.depths, tile.offset)
        self._table.append_temp(tile.temps, tile.offset)

        if tile.offset not in self._renderers:
            insort(self._starts, tile.offset)
        self._renderers[tile.offset] = TileRenderer(tile, self._table, self._options)
        self._failed.discard(tile.offset)
        logger.debug("Tile %s loaded: %s columns", tile.offset, tile.width)
        self.render(self._scroll)

    def tile_failed(self, offset: int, error: object) -> None:
        # The start stays in the dedup set; see retry_failed().
        self._failed.add(offset)
        logger.warning("Tile %s failed to load: %s", offset, error)

    def retry_failed(self) -> List[int]:
        """Forget failed tile starts and request the current window again."""
        if not self._failed:
            return []
        logger.info("Retrying %s failed tiles", len(self._failed))
        self._requested -= self._failed
        self._failed.clear()
        return self.fetch_tiles(self._scroll)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def compute_range(self, offset: int) -> float:
        if not self._options.auto_range:
            return float(self._options.depth_range)
        depth_range = 0.0
        for renderer in self.visible_renderers(offset):
            if renderer.max_depth_area() > depth_range:
                depth_range = renderer.max_depth_area()
        return depth_range

    def render(self, offset: int | None = None) -> List[TileRenderer]:
        scroll = self._scroll if offset is None else offset
        self._effective_range = self.compute_range(scroll)
        visible = self.visible_renderers(scroll)
        for renderer in visible:
            renderer.set_range(self._effective_range)
            renderer.render()
        if self._on_repaint is not None:
            self._on_repaint()
        return visible

    def renderer_at(self, offset: int) -> TileRenderer | None:
        index = bisect_right(self._starts, offset) - 1
        if index < 0:
            return None
        renderer = self._renderers[self._starts[index]]
        return renderer if renderer.is_current(offset) else None

    def paint_rect(self, renderer: TileRenderer) -> Tuple[int, int, int, int]:
        """Screen ``(x, y, width, height)`` a tile is drawn into.

        Tiles keep the height they were fetched at and are stretched to the
        current viewport height, which is the height readouts and the ruler
        measure against.
        """
        return renderer.offset - self._scroll, 0, renderer.width, self._viewport_height

    def set_options(self, options: DisplayOptions) -> None:
        self._options = options
        for renderer in self._renderers.values():
            renderer.apply_options(options)
        self.render(self._scroll)

    def set_dirty(self) -> None:
        for renderer in self._renderers.values():
            renderer.mark_dirty()
        self.on_scroll(self._scroll)

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------
    def to_logical(
        self, client_x: int, client_y: int, origin_x: int, origin_y: int
    ) -> Tuple[int, int]:
        return client_x - origin_x + self._scroll, client_y - origin_y

    def readout(self, x: int, y: int) -> CursorReadout:
        table = self._table
        depth = table.depth_at(x) if table is not None else 0.0
        temperature = table.temp_at(x) if table is not None else 0.0

        renderer = self.renderer_at(x)
        tile_range = renderer.range if renderer is not None else 0.0
        height = self._viewport_height
        cursor = 0.0
        if height > 0:
            if self._options.sidescan:
                surface = height / 2.0
                cursor = abs(surface - y) * tile_range / surface
            else:
                cursor = tile_range * (y / float(height))
        return CursorReadout(x, y, depth, cursor, temperature)

    @staticmethod
    def label_texts(readout: CursorReadout) -> Tuple[str, str, str]:
        return (
            f"Depth: {readout.depth:g} m",
            f"Cursor: {readout.cursor:.1f} m",
            f"Temp: {readout.temperature:g} C",
        )

    def ruler(self, x: int) -> RulerMarker:
        height = self._viewport_height
        screen_x = x - self._scroll
        if self._options.sidescan or self._table is None:
            return RulerMarker(screen_x, height, None)

        depth = self._table.depth_at(x)
        low_limit = self._table.low_limit_at(x)
        renderer = self.renderer_at(x)
        if low_limit <= 0 or renderer is None:
            return RulerMarker(screen_x, height, None)
        raw_row = int(height * depth / low_limit)
        return RulerMarker(screen_x, height, renderer.map_pixel_row_to_depth(x, raw_row))

    def click(self, x: int) -> None:
        if self._on_click is not None:
            self._on_click(x)
