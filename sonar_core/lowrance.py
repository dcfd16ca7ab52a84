"""Lowrance SL2 reader.

An SL2 file is an 8 byte file header followed by variable-length blocks, one
per channel sample. Each block carries a 144 byte fixed header (position,
depth, temperature, sounder range) and then the echo samples. Blocks of all
channels are interleaved, so the file is scanned once at open time to build a
per-channel offset index.

Field layout follows the public reverse-engineering notes on the format
(openstreetmap wiki "SL2", kmpm/node-sl2format).
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, List

from sonar_core.binary import (
    get_float32,
    get_int32,
    get_uint16,
    get_uint32,
    read_exact,
)
from sonar_core.errors import (
    FormatMismatchError,
    LogFileNotFoundError,
    ShortRecordError,
    TruncatedError,
)
from sonar_core.mercator import to_latitude, to_longitude
from sonar_core.model import ChannelKind, Ping, check_range
from sonar_core.sidescan import merge_channels, paired_length

logger = logging.getLogger(__name__)

FILE_HEADER_SIZE = 8
BLOCK_HEADER_SIZE = 144
SL2_FORMAT = 2

FEET_TO_METRES = 0.3048
KNOTS_TO_KMH = 1.852

PRIMARY = 0
DOWNSCAN = 2
LEFT_SIDESCAN = 3
RIGHT_SIDESCAN = 4
COMPOSITE_SIDESCAN = 5

_BLOCK_SIZE_OFFSET = 28
_CHANNEL_OFFSET = 32
_PACKET_SIZE_OFFSET = 34
_LOWER_LIMIT_OFFSET = 44
_WATER_DEPTH_OFFSET = 64
_SPEED_GPS_OFFSET = 100
_TEMPERATURE_OFFSET = 104
_LONGITUDE_OFFSET = 108
_LATITUDE_OFFSET = 112
_COURSE_OFFSET = 120
_TIME_OFFSET = 140


def parse_file_header(raw: bytes) -> tuple[int, int, int]:
    """Return ``(format, version, block_size)``."""
    if len(raw) < FILE_HEADER_SIZE:
        raise TruncatedError(
            f"SL2 header is truncated: expected {FILE_HEADER_SIZE} bytes, found {len(raw)}"
        )
    fmt = get_uint16(raw, 0)
    if fmt != SL2_FORMAT:
        raise FormatMismatchError(f"Not an SL2 file (format id {fmt})")
    return fmt, get_uint16(raw, 2), get_uint16(raw, 4)


def parse_block(raw: bytes) -> Ping:
    """Decode one SL2 block (header plus echo samples)."""

    if len(raw) < BLOCK_HEADER_SIZE:
        raise ShortRecordError(
            f"SL2 block is truncated: expected {BLOCK_HEADER_SIZE} header bytes, found {len(raw)}"
        )
    packet_size = get_uint16(raw, _PACKET_SIZE_OFFSET)
    end = BLOCK_HEADER_SIZE + packet_size
    if len(raw) < end:
        raise ShortRecordError(
            f"SL2 block is truncated: expected {end} bytes, found {len(raw)}"
        )
    return Ping(
        timestamp=get_uint32(raw, _TIME_OFFSET),
        longitude=to_longitude(get_int32(raw, _LONGITUDE_OFFSET)),
        latitude=to_latitude(get_int32(raw, _LATITUDE_OFFSET)),
        speed=get_float32(raw, _SPEED_GPS_OFFSET) * KNOTS_TO_KMH,
        track=math.degrees(get_float32(raw, _COURSE_OFFSET)),
        depth=get_float32(raw, _WATER_DEPTH_OFFSET) * FEET_TO_METRES,
        temperature=get_float32(raw, _TEMPERATURE_OFFSET),
        low_limit=get_float32(raw, _LOWER_LIMIT_OFFSET) * FEET_TO_METRES,
        soundings=bytes(raw[BLOCK_HEADER_SIZE:end]),
    )


def scan_blocks(raw: bytes) -> Dict[int, List[int]]:
    """Map each channel id to the file offsets of its blocks."""

    offsets: Dict[int, List[int]] = {}
    position = FILE_HEADER_SIZE
    while position + BLOCK_HEADER_SIZE <= len(raw):
        block_bytes = get_uint16(raw, position + _BLOCK_SIZE_OFFSET)
        channel = get_uint16(raw, position + _CHANNEL_OFFSET)
        packet_size = get_uint16(raw, position + _PACKET_SIZE_OFFSET)
        if position + BLOCK_HEADER_SIZE + packet_size > len(raw):
            logger.warning(
                "Incomplete SL2 block at 0x%X; ignoring the rest of the file", position
            )
            break
        offsets.setdefault(channel, []).append(position)
        if block_bytes < BLOCK_HEADER_SIZE:
            # the last block of a recording reports zero bytes
            break
        position += block_bytes
    return offsets


def _channel_ids(channel: ChannelKind, available: Dict[int, List[int]]) -> tuple[int, ...]:
    if channel is ChannelKind.TRADITIONAL:
        return (PRIMARY,)
    if channel is ChannelKind.DOWNSCAN:
        return (DOWNSCAN,)
    if LEFT_SIDESCAN in available and RIGHT_SIDESCAN in available:
        return (LEFT_SIDESCAN, RIGHT_SIDESCAN)
    return (COMPOSITE_SIDESCAN,)


class LowranceLog:
    """Random access to the pings of one SL2 channel."""

    def __init__(
        self,
        path: Path,
        channel: ChannelKind,
        indexes: List[List[int]],
    ) -> None:
        self.path = path
        self.channel = channel
        self._indexes = indexes
        if len(indexes) == 2:
            self._length = paired_length(len(indexes[0]), len(indexes[1]), str(path))
        else:
            self._length = len(indexes[0])

    def __len__(self) -> int:
        return self._length

    def length(self) -> int:
        return self._length

    def ping_range(self, offset: int, count: int) -> List[Ping]:
        check_range(offset, count, self._length)
        with open(self.path, "rb") as handle:
            decoded = [
                self._read_channel(handle, index, offset, count)
                for index in self._indexes
            ]
        if len(decoded) == 2:
            return merge_channels(decoded[0], decoded[1])
        return decoded[0]

    def _read_channel(self, handle, index: List[int], offset: int, count: int) -> List[Ping]:
        pings: List[Ping] = []
        for position in range(offset, offset + count):
            handle.seek(index[position])
            what = f"{self.path.name} block {position} at 0x{index[position]:X}"
            header = read_exact(handle, BLOCK_HEADER_SIZE, ShortRecordError, what)
            packet_size = get_uint16(header, _PACKET_SIZE_OFFSET)
            samples = read_exact(handle, packet_size, ShortRecordError, what)
            pings.append(parse_block(header + samples))
        return pings


def open_lowrance(
    path: Path | str, channel: ChannelKind = ChannelKind.TRADITIONAL
) -> LowranceLog:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise LogFileNotFoundError(f"Sonar log not found: {path}") from exc

    _fmt, version, _block_size = parse_file_header(raw)
    available = scan_blocks(raw)
    logger.info(
        "Opening SL2 log: path=%s version=%s channel=%s blocks=%s",
        path,
        version,
        channel.value,
        {chan: len(offsets) for chan, offsets in sorted(available.items())},
    )

    ids = _channel_ids(channel, available)
    indexes = [available.get(chan_id, []) for chan_id in ids]
    if not any(indexes):
        logger.warning("SL2 log %s has no %s pings", path, channel.value)
    return LowranceLog(path, channel, indexes)
