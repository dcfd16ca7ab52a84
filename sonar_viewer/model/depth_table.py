"""Per-pixel depth, low limit and temperature accumulated from fetched tiles.

The table is created once the total pixel width of the log is known and is
only written from the tile-completion path. Reads never fail: pixels that no
tile has covered yet report ``0.0`` so pointer readouts keep working while
tiles are still in flight.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np


class DepthTable:
    def __init__(self, size: int = 0) -> None:
        self._depths = np.zeros(size, dtype=np.float64)
        self._low_limits = np.zeros(size, dtype=np.float64)
        self._temps = np.zeros(size, dtype=np.float64)

    @property
    def size(self) -> int:
        return int(self._depths.size)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def append_depth(self, values: Sequence[float], start_offset: int) -> None:
        self._depths = self._write(self._depths, values, start_offset)

    def append_low_limit(self, values: Sequence[float], start_offset: int) -> None:
        self._low_limits = self._write(self._low_limits, values, start_offset)

    def append_temp(self, values: Sequence[float], start_offset: int) -> None:
        self._temps = self._write(self._temps, values, start_offset)

    def _write(
        self, array: np.ndarray, values: Sequence[float], start_offset: int
    ) -> np.ndarray:
        if start_offset < 0:
            raise ValueError(f"negative table offset {start_offset}")
        data = np.asarray(values, dtype=np.float64)
        end = start_offset + data.size
        if end > array.size:
            grown = np.zeros(end, dtype=np.float64)
            grown[: array.size] = array
            array = grown
        array[start_offset:end] = data
        return array

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def depth_at(self, pixel: int) -> float:
        return self._read(self._depths, pixel)

    def low_limit_at(self, pixel: int) -> float:
        return self._read(self._low_limits, pixel)

    def temp_at(self, pixel: int) -> float:
        return self._read(self._temps, pixel)

    def depths(self, start: int, count: int) -> np.ndarray:
        return self._slice(self._depths, start, count)

    def low_limits(self, start: int, count: int) -> np.ndarray:
        return self._slice(self._low_limits, start, count)

    @staticmethod
    def _read(array: np.ndarray, pixel: int) -> float:
        if 0 <= pixel < array.size:
            return float(array[pixel])
        return 0.0

    @staticmethod
    def _slice(array: np.ndarray, start: int, count: int) -> np.ndarray:
        out = np.zeros(count, dtype=np.float64)
        lo = max(start, 0)
        hi = min(start + count, array.size)
        if hi > lo:
            out[lo - start:hi - start] = array[lo:hi]
        return out
