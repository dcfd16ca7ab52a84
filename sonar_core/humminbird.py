"""Humminbird DAT/IDX/SON reader.

A recording is a ``.DAT`` header file plus a directory named after the
recording that holds one ``Bnnn.IDX``/``Bnnn.SON`` pair per channel. Index
files list the byte offset of every ping record inside the matching SON
file. In side-scan mode the left (B002) and right (B003) channels are merged
into one profile per ping.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Tuple

from sonar_core.binary import get_int16_be, get_int32_be, read_exact
from sonar_core.errors import (
    FormatMismatchError,
    LogFileNotFoundError,
    ShortRecordError,
    TruncatedError,
)
from sonar_core.mercator import to_latitude, to_longitude
from sonar_core.model import ChannelKind, LogHeader, Ping, check_range
from sonar_core.sidescan import merge_channels, paired_length

logger = logging.getLogger(__name__)

HEADER_LEAD_IN = 20
HEADER_SIZE = 56
NAME_SIZE = 10
INDEX_RECORD_SIZE = 8
RECORD_HEADER_SIZE = 58

_CHANNEL_FILES: Dict[ChannelKind, Tuple[str, ...]] = {
    ChannelKind.TRADITIONAL: ("B000",),
    ChannelKind.DOWNSCAN: ("B001",),
    ChannelKind.SIDESCAN: ("B002", "B003"),
}


def parse_header(raw: bytes) -> LogHeader:
    if len(raw) < HEADER_SIZE:
        raise TruncatedError(
            f"DAT header is truncated: expected {HEADER_SIZE} bytes, found {len(raw)}"
        )
    name_start = HEADER_LEAD_IN + 12
    name_raw = raw[name_start:name_start + NAME_SIZE]
    return LogHeader(
        timestamp=get_int32_be(raw, HEADER_LEAD_IN),
        raw_longitude=get_int32_be(raw, HEADER_LEAD_IN + 4),
        raw_latitude=get_int32_be(raw, HEADER_LEAD_IN + 8),
        name=name_raw.split(b"\x00", 1)[0].decode("ascii", errors="ignore"),
        # two bytes of null terminator follow the name
        unknown1=get_int32_be(raw, name_start + NAME_SIZE + 2),
        unknown2=get_int32_be(raw, name_start + NAME_SIZE + 6),
        block_size=get_int32_be(raw, name_start + NAME_SIZE + 10),
    )


def read_header(path: Path) -> LogHeader:
    try:
        with open(path, "rb") as handle:
            raw = read_exact(handle, HEADER_SIZE, TruncatedError, f"DAT header {path}")
    except FileNotFoundError as exc:
        raise LogFileNotFoundError(f"Sonar log not found: {path}") from exc
    header = parse_header(raw)
    if header.block_size < RECORD_HEADER_SIZE:
        raise FormatMismatchError(
            f"{path}: block size {header.block_size} is smaller than a ping record header"
        )
    return header


def parse_index(raw: bytes) -> List[int]:
    """Return the record offsets of an IDX file.

    Each record is ``[time:int32][offset:int32]``; the time is not needed.
    """
    count = len(raw) // INDEX_RECORD_SIZE
    if len(raw) % INDEX_RECORD_SIZE:
        logger.warning(
            "Ignoring %s trailing bytes in index", len(raw) % INDEX_RECORD_SIZE
        )
    return [
        get_int32_be(raw, i * INDEX_RECORD_SIZE + 4)
        for i in range(count)
    ]


def read_index(path: Path) -> List[int]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise LogFileNotFoundError(f"Index file not found: {path}") from exc
    return parse_index(raw)


def parse_record(raw: bytes, block_size: int) -> Ping:
    """Decode one SON ping record of ``block_size`` bytes."""

    if len(raw) < block_size:
        raise ShortRecordError(
            f"ping record is truncated: expected {block_size} bytes, found {len(raw)}"
        )
    return Ping(
        timestamp=get_int32_be(raw, 10),
        longitude=to_longitude(get_int32_be(raw, 15)),
        latitude=to_latitude(get_int32_be(raw, 20)),
        track=get_int16_be(raw, 27) / 10.0,
        speed=get_int16_be(raw, 32) * 3.6,
        # frequency at 39 and an unidentified field at 53 are not used
        depth=0.0,
        temperature=0.0,
        low_limit=0.0,
        soundings=bytes(raw[RECORD_HEADER_SIZE:block_size]),
    )


def find_file(directory: Path, name: str) -> Path:
    """Locate ``name`` inside ``directory`` ignoring case."""

    candidate = directory / name
    if candidate.is_file():
        return candidate
    if directory.is_dir():
        for entry in os.listdir(directory):
            if entry.lower() == name.lower():
                return directory / entry
    raise LogFileNotFoundError(f"{name} not found in {directory}")


class HumminbirdLog:
    """Random access to the pings of one Humminbird recording channel."""

    def __init__(
        self,
        path: Path,
        channel: ChannelKind,
        header: LogHeader,
        channels: List[Tuple[Path, List[int]]],
    ) -> None:
        self.path = path
        self.channel = channel
        self.header = header
        self._channels = channels
        if len(channels) == 2:
            self._length = paired_length(
                len(channels[0][1]), len(channels[1][1]), str(path)
            )
        else:
            self._length = len(channels[0][1])

    def __len__(self) -> int:
        return self._length

    def length(self) -> int:
        return self._length

    @property
    def timestamp(self) -> int:
        return self.header.timestamp

    @property
    def longitude(self) -> float:
        return self.header.longitude

    @property
    def latitude(self) -> float:
        return self.header.latitude

    def ping_range(self, offset: int, count: int) -> List[Ping]:
        check_range(offset, count, self._length)
        decoded = [
            self._read_channel(data_path, index, offset, count)
            for data_path, index in self._channels
        ]
        if len(decoded) == 2:
            return merge_channels(decoded[0], decoded[1])
        return decoded[0]

    def _read_channel(
        self, data_path: Path, index: List[int], offset: int, count: int
    ) -> List[Ping]:
        block_size = self.header.block_size
        pings: List[Ping] = []
        with open(data_path, "rb") as handle:
            for position in range(offset, offset + count):
                handle.seek(index[position])
                raw = read_exact(
                    handle,
                    block_size,
                    ShortRecordError,
                    f"{data_path.name} ping {position} at 0x{index[position]:X}",
                )
                pings.append(parse_record(raw, block_size))
        return pings


def channel_directory(path: Path, header: LogHeader) -> Path:
    # header name is e.g. "R00012.DAT"; strip the extension
    dirname = header.name[:-4]
    return path.parent / dirname


def open_humminbird(
    path: Path | str, channel: ChannelKind = ChannelKind.TRADITIONAL
) -> HumminbirdLog:
    path = Path(path)
    header = read_header(path)
    directory = channel_directory(path, header)
    logger.info(
        "Opening Humminbird log: path=%s channel=%s dir=%s block_size=%s",
        path,
        channel.value,
        directory,
        header.block_size,
    )

    channels: List[Tuple[Path, List[int]]] = []
    for stem in _CHANNEL_FILES[channel]:
        index_path = find_file(directory, f"{stem}.IDX")
        data_path = find_file(directory, f"{stem}.SON")
        index = read_index(index_path)
        logger.debug("Loaded index %s: %s pings", index_path, len(index))
        channels.append((data_path, index))

    return HumminbirdLog(path, channel, header, channels)
