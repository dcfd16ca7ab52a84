"""Data model shared by the sonar log decoders."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

from sonar_core.mercator import to_latitude, to_longitude


class ChannelKind(Enum):
    """Sonar channel selected when a log is opened."""

    TRADITIONAL = "traditional"
    DOWNSCAN = "downscan"
    SIDESCAN = "sidescan"

    @classmethod
    def from_name(cls, name: str) -> "ChannelKind":
        key = name.strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown sonar channel {name!r}")


@dataclass(frozen=True)
class Ping:
    """One decoded sonar sample.

    Depth, temperature and low limit are metres/°C and are ``0.0`` for
    formats that do not record them.
    """

    timestamp: int
    latitude: float
    longitude: float
    speed: float
    track: float
    depth: float
    temperature: float
    low_limit: float
    soundings: bytes


@dataclass(frozen=True)
class LogHeader:
    timestamp: int
    raw_longitude: int
    raw_latitude: int
    name: str
    unknown1: int
    unknown2: int
    block_size: int

    @property
    def longitude(self) -> float:
        return to_longitude(self.raw_longitude)

    @property
    def latitude(self) -> float:
        return to_latitude(self.raw_latitude)


class SonarLog(Protocol):
    channel: ChannelKind

    def __len__(self) -> int:  # pragma: no cover - protocol only
        ...

    def length(self) -> int:  # pragma: no cover - protocol only
        ...

    def ping_range(self, offset: int, count: int) -> List[Ping]:  # pragma: no cover - protocol only
        ...


def check_range(offset: int, count: int, length: int) -> None:
    if offset < 0 or count < 0 or offset + count > length:
        raise IndexError(
            f"ping range {offset}+{count} outside log of {length} pings"
        )
