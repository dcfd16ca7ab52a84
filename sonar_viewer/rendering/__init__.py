"""Rendering helpers for the sonar strip widget."""
from __future__ import annotations

from sonar_viewer.rendering.palettes import (
    BACKGROUND,
    OVERLAY_COLOR,
    palette,
    palette_names,
)
from sonar_viewer.rendering.tile_image import build_tile_data, resample_soundings
from sonar_viewer.rendering.tile_renderer import TileRenderer
