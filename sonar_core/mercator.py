"""Conversion between vendor Mercator units and WGS84 degrees.

Humminbird and Lowrance both store easting/northing in a spherical Mercator
projection that uses the WGS84 *polar* radius rather than the equatorial one.
"""
from __future__ import annotations

import math

EARTH_RADIUS = 6356752.3142
RAD_CONVERSION = 180.0 / math.pi


def to_longitude(mercator: float) -> float:
    return mercator / EARTH_RADIUS * RAD_CONVERSION


def to_latitude(mercator: float) -> float:
    temp = math.exp(mercator / EARTH_RADIUS)
    temp = (2 * math.atan(temp)) - (math.pi / 2)
    return temp * RAD_CONVERSION


def longitude_to_mercator(longitude: float) -> float:
    """Inverse of :func:`to_longitude`."""
    return longitude / RAD_CONVERSION * EARTH_RADIUS


def latitude_to_mercator(latitude: float) -> float:
    """Inverse of :func:`to_latitude`."""
    temp = (latitude / RAD_CONVERSION + math.pi / 2) / 2
    return math.log(math.tan(temp)) * EARTH_RADIUS
