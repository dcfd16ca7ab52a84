from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PALETTE = "grayscale"


@dataclass(frozen=True)
class DisplayOptions:
    """User display settings applied to every tile.

    ``depth_range`` of ``0`` selects auto-range.
    """

    overlay: bool = False
    color: str = DEFAULT_PALETTE
    sidescan: bool = False
    depth_range: float = 0.0

    @property
    def auto_range(self) -> bool:
        return self.depth_range <= 0
