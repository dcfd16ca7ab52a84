"""Merge the two side-scan channels into one mirrored profile per ping."""
from __future__ import annotations

from dataclasses import replace
import logging
from typing import List, Sequence

from sonar_core.model import Ping

logger = logging.getLogger(__name__)


def merge_soundings(first: bytes, second: bytes) -> bytes:
    """Return ``reversed(first) + second``.

    The first channel looks to port, so its samples run from the far edge
    towards the transducer once reversed.
    """
    return bytes(first[::-1]) + bytes(second)


def merge_channels(first: Sequence[Ping], second: Sequence[Ping]) -> List[Ping]:
    """Combine channel-aligned pings; the first channel's record is kept."""

    if len(first) != len(second):
        raise ValueError(
            f"side-scan channels are not aligned: {len(first)} != {len(second)} pings"
        )
    return [
        replace(left, soundings=merge_soundings(left.soundings, right.soundings))
        for left, right in zip(first, second)
    ]


def paired_length(first_length: int, second_length: int, source: str) -> int:
    """Number of pings addressable in both channels."""

    if first_length != second_length:
        logger.warning(
            "Side-scan channel lengths differ in %s: %s vs %s; using %s pings",
            source,
            first_length,
            second_length,
            min(first_length, second_length),
        )
    return min(first_length, second_length)
