"""Echo-intensity colour palettes as 256-entry ARGB32 lookup tables."""
from __future__ import annotations

from functools import lru_cache
import logging
from typing import Dict, List, Sequence, Tuple

import numpy as np

from sonar_viewer.model.display_options import DEFAULT_PALETTE

logger = logging.getLogger(__name__)

Stop = Tuple[float, Tuple[int, int, int]]

BACKGROUND = np.uint32(0xFF000000)
OVERLAY_COLOR = np.uint32(0xFFFF2020)

_PALETTE_STOPS: Dict[str, List[Stop]] = {
    "grayscale": [(0.0, (0, 0, 0)), (1.0, (255, 255, 255))],
    "inverted": [(0.0, (255, 255, 255)), (1.0, (0, 0, 0))],
    "amber": [(0.0, (0, 0, 0)), (0.6, (200, 120, 0)), (1.0, (255, 230, 120))],
    "blue": [
        (0.0, (0, 0, 40)),
        (0.35, (0, 90, 200)),
        (0.6, (0, 220, 220)),
        (0.8, (255, 230, 0)),
        (1.0, (255, 40, 0)),
    ],
    "thermal": [
        (0.0, (0, 0, 0)),
        (0.4, (160, 0, 0)),
        (0.75, (255, 200, 0)),
        (1.0, (255, 255, 255)),
    ],
}


def palette_names() -> List[str]:
    return list(_PALETTE_STOPS)


def _build_lut(stops: Sequence[Stop]) -> np.ndarray:
    positions = np.array([pos for pos, _ in stops]) * 255.0
    ramp = np.arange(256, dtype=np.float64)
    channels = [
        np.interp(ramp, positions, [color[index] for _, color in stops])
        for index in range(3)
    ]
    red, green, blue = (np.rint(c).astype(np.uint32) for c in channels)
    return (np.uint32(0xFF) << np.uint32(24)) | (red << 16) | (green << 8) | blue


@lru_cache(maxsize=None)
def palette(name: str) -> np.ndarray:
    stops = _PALETTE_STOPS.get(name)
    if stops is None:
        logger.warning("Unknown palette %r; using %s", name, DEFAULT_PALETTE)
        stops = _PALETTE_STOPS[DEFAULT_PALETTE]
    lut = _build_lut(stops)
    lut.setflags(write=False)
    return lut
