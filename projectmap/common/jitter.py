"""Deterministic privacy jitter for published coordinates.

The same ``(radius, seed)`` pair always produces the same offset, so a project
re-delivered by the webhook sender keeps its pin in place on the map.
"""

import math
from typing import Tuple

_MASK32 = 0xFFFFFFFF

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

# Golden-ratio constant; decorrelates the angle draw from the radius draw
ANGLE_SEED_XOR = 0x9E3779B9

METERS_PER_DEGREE = 111320.0


def hash_string(value: str) -> int:
    """FNV-1a 32-bit hash of the UTF-8 bytes of ``value``."""
    h = FNV_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & _MASK32
    return h


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def mulberry32(seed: int) -> float:
    """First draw in [0, 1) of a mulberry32 generator seeded with ``seed``."""
    t = (seed + 0x6D2B79F5) & _MASK32
    t = _imul(t ^ (t >> 15), t | 1)
    t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
    return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0


def jitter_lat_lng(lat: float, lng: float, radius_meters: float, seed: str) -> Tuple[float, float]:
    """Move ``(lat, lng)`` by at most ``radius_meters`` in a direction derived from ``seed``.

    The radius draw is square-rooted so offsets are uniform over the disk
    rather than clustered near the true location.
    """
    if not radius_meters or radius_meters <= 0:
        return lat, lng

    h = hash_string(str(seed))
    u1 = mulberry32(h)
    u2 = mulberry32(h ^ ANGLE_SEED_XOR)

    r = radius_meters * math.sqrt(u1)
    theta = 2 * math.pi * u2

    d_lat = (r * math.cos(theta)) / METERS_PER_DEGREE

    cos_lat = math.cos(math.radians(lat))
    if abs(cos_lat) < 1e-12:
        # Meridians converge at the poles; any longitude is the same point
        d_lng = 0.0
    else:
        d_lng = (r * math.sin(theta)) / (METERS_PER_DEGREE * cos_lat)

    # Offsets past a pole stop at the pole; longitude wraps across the antimeridian
    new_lat = max(-90.0, min(90.0, lat + d_lat))
    new_lng = lng + d_lng
    if not -180.0 <= new_lng <= 180.0:
        new_lng = ((new_lng + 180.0) % 360.0) - 180.0
    return new_lat, new_lng
