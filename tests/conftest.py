from __future__ import annotations

import struct
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

from sonar_core.errors import ShortRecordError
from sonar_core.model import ChannelKind, Ping, check_range

HUMMINBIRD_BLOCK_SIZE = 64  # 58 byte record header + 6 samples


def make_ping(**overrides) -> Ping:
    fields = dict(
        timestamp=0,
        latitude=0.0,
        longitude=0.0,
        speed=0.0,
        track=0.0,
        depth=0.0,
        temperature=0.0,
        low_limit=0.0,
        soundings=b"",
    )
    fields.update(overrides)
    return Ping(**fields)


def dat_header(
    name: str = "R00001.DAT",
    *,
    timestamp: int = 1_300_000_000,
    longitude: int = 2_000_000,
    latitude: int = 8_000_000,
    unknown1: int = 7,
    unknown2: int = 9,
    block_size: int = HUMMINBIRD_BLOCK_SIZE,
) -> bytes:
    encoded = name.encode("ascii").ljust(10, b"\x00")
    return (
        bytes(20)
        + struct.pack(">iii", timestamp, longitude, latitude)
        + encoded
        + bytes(2)
        + struct.pack(">iii", unknown1, unknown2, block_size)
    )


def son_record(
    *,
    time: int = 0,
    longitude: int = 0,
    latitude: int = 0,
    heading: int = 0,
    speed: int = 0,
    soundings: bytes = b"",
    block_size: int = HUMMINBIRD_BLOCK_SIZE,
) -> bytes:
    record = bytearray(block_size)
    struct.pack_into(">i", record, 10, time)
    struct.pack_into(">i", record, 15, longitude)
    struct.pack_into(">i", record, 20, latitude)
    struct.pack_into(">h", record, 27, heading)
    struct.pack_into(">h", record, 32, speed)
    record[58:58 + len(soundings)] = soundings
    return bytes(record)


def write_channel(directory: Path, stem: str, records: Sequence[bytes]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    son = bytearray()
    idx = bytearray()
    for number, record in enumerate(records):
        idx += struct.pack(">ii", number * 100, len(son))
        son += record
    (directory / f"{stem}.IDX").write_bytes(bytes(idx))
    (directory / f"{stem}.SON").write_bytes(bytes(son))


@pytest.fixture
def humminbird_log(tmp_path):
    """Build a recording: ``R00001.DAT`` plus ``R00001/Bnnn.{IDX,SON}``."""

    def build(channels: Dict[str, Sequence[bytes]], name: str = "R00001.DAT") -> Path:
        dat_path = tmp_path / name
        dat_path.write_bytes(dat_header(name))
        for stem, records in channels.items():
            write_channel(tmp_path / name[:-4], stem, records)
        return dat_path

    return build


def sl2_file_header(fmt: int = 2, version: int = 1, block_size: int = 3200) -> bytes:
    return struct.pack("<HHHH", fmt, version, block_size, 0)


def sl2_block(
    channel: int,
    samples: bytes,
    *,
    lower_limit_ft: float = 0.0,
    depth_ft: float = 0.0,
    speed_knots: float = 0.0,
    temperature: float = 0.0,
    longitude: int = 0,
    latitude: int = 0,
    course_rad: float = 0.0,
    time: int = 0,
    block_bytes: int | None = None,
) -> bytes:
    header = bytearray(144)
    size = 144 + len(samples) if block_bytes is None else block_bytes
    struct.pack_into("<H", header, 28, size)
    struct.pack_into("<H", header, 32, channel)
    struct.pack_into("<H", header, 34, len(samples))
    struct.pack_into("<f", header, 44, lower_limit_ft)
    struct.pack_into("<f", header, 64, depth_ft)
    struct.pack_into("<f", header, 100, speed_knots)
    struct.pack_into("<f", header, 104, temperature)
    struct.pack_into("<i", header, 108, longitude)
    struct.pack_into("<i", header, 112, latitude)
    struct.pack_into("<f", header, 120, course_rad)
    struct.pack_into("<I", header, 140, time)
    return bytes(header) + samples


@pytest.fixture
def sl2_log(tmp_path):
    def build(blocks: List[Tuple[int, bytes]], name: str = "Chart.sl2", **fields) -> Path:
        path = tmp_path / name
        body = b"".join(sl2_block(channel, samples, **fields) for channel, samples in blocks)
        path.write_bytes(sl2_file_header() + body)
        return path

    return build


class FakeSonarLog:
    """In-memory log: ping ``i`` has depth ``i`` and samples ``sample`` (or ``i``)."""

    channel = ChannelKind.TRADITIONAL

    def __init__(self, count: int, *, broken_from: int | None = None, sample: int | None = None) -> None:
        self._count = count
        self._broken_from = broken_from
        self._sample = sample
        self.calls: list[tuple[int, int]] = []

    def __len__(self) -> int:
        return self._count

    def length(self) -> int:
        return self._count

    def ping_range(self, offset: int, count: int) -> List[Ping]:
        check_range(offset, count, self._count)
        self.calls.append((offset, count))
        if self._broken_from is not None and offset + count > self._broken_from:
            raise ShortRecordError("record truncated")
        return [
            make_ping(
                timestamp=i,
                depth=float(i),
                soundings=bytes([(i if self._sample is None else self._sample) % 256] * 4),
            )
            for i in range(offset, offset + count)
        ]
