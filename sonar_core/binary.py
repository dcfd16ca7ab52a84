"""Fixed-offset integer/float readers for vendor sonar records.

Humminbird files are big-endian (Java ``DataInputStream`` layout) while
Lowrance SL2 files are little-endian, so both byte orders are provided.
"""
from __future__ import annotations

import struct
from typing import BinaryIO, Type


def get_int16_be(input_bytes, offset):
    return int.from_bytes(input_bytes[offset:offset+2], byteorder='big', signed=True)

def get_int32_be(input_bytes, offset):
    return int.from_bytes(input_bytes[offset:offset+4], byteorder='big', signed=True)

def get_uint16(input_bytes, offset):
    return int.from_bytes(input_bytes[offset:offset+2], byteorder='little', signed=False)

def get_int32(input_bytes, offset):
    return int.from_bytes(input_bytes[offset:offset+4], byteorder='little', signed=True)

def get_uint32(input_bytes, offset):
    return int.from_bytes(input_bytes[offset:offset+4], byteorder='little', signed=False)

def get_float32(input_bytes, offset):
    return struct.unpack_from('<f', input_bytes, offset)[0]


def read_exact(
    handle: BinaryIO,
    size: int,
    error_cls: Type[Exception],
    what: str,
) -> bytes:
    """Read exactly ``size`` bytes from ``handle`` or raise ``error_cls``."""

    data = handle.read(size)
    if len(data) < size:
        raise error_cls(
            f"{what}: expected {size} bytes, found {len(data)}"
        )
    return data
