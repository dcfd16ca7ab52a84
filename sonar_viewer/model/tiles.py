"""Tile partitioning of the horizontal scroll axis.

One pixel column corresponds to one ping, so a tile of width ``W`` starting
at ``k * W`` holds pings ``k * W`` .. ``(k + 1) * W - 1``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

DEFAULT_TILE_WIDTH = 400


def aligned_offset(offset: int, tile_width: int = DEFAULT_TILE_WIDTH) -> int:
    return offset - offset % tile_width


def tile_starts(
    offset: int, viewport_width: int, tile_width: int = DEFAULT_TILE_WIDTH
) -> List[int]:
    """Tile starts covering the viewport at ``offset`` plus one tile of lookahead."""

    start = aligned_offset(offset, tile_width)
    return list(range(start, start + viewport_width + tile_width, tile_width))


@dataclass(frozen=True, eq=False)
class TileData:
    """Payload delivered for one fetched tile.

    ``image`` is a ``height x width`` uint8 echo-intensity raster; the three
    per-column arrays have ``width`` entries.
    """

    offset: int
    image: np.ndarray
    low_limits: np.ndarray
    depths: np.ndarray
    temps: np.ndarray

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])
