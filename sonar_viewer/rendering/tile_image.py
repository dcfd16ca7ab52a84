"""Build tile payloads from decoded pings.

This is the data side of a tile fetch: each ping becomes one pixel column
whose soundings are resampled to the viewport height, alongside the
per-column low limit, depth and temperature.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from sonar_core.model import Ping
from sonar_viewer.model.tiles import TileData


def resample_soundings(soundings: bytes, height: int) -> np.ndarray:
    """Nearest-sample stretch of one echo profile to ``height`` rows."""

    samples = np.frombuffer(soundings, dtype=np.uint8)
    if samples.size == 0 or height <= 0:
        return np.zeros(max(height, 0), dtype=np.uint8)
    rows = np.arange(height, dtype=np.int64) * samples.size // height
    return samples[rows]


def build_tile_data(pings: Sequence[Ping], height: int, offset: int) -> TileData:
    image = np.zeros((height, len(pings)), dtype=np.uint8)
    for column, ping in enumerate(pings):
        image[:, column] = resample_soundings(ping.soundings, height)
    return TileData(
        offset=offset,
        image=image,
        low_limits=np.array([ping.low_limit for ping in pings], dtype=np.float64),
        depths=np.array([ping.depth for ping in pings], dtype=np.float64),
        temps=np.array([ping.temperature for ping in pings], dtype=np.float64),
    )
