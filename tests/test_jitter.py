"""Tests for deterministic privacy jitter."""

import math

import pytest

from projectmap.common import hash_string, jitter_lat_lng, mulberry32
from projectmap.common.jitter import METERS_PER_DEGREE


def _offset_meters(lat, lng, jittered_lat, jittered_lng):
    dy = (jittered_lat - lat) * METERS_PER_DEGREE
    dx = (jittered_lng - lng) * METERS_PER_DEGREE * math.cos(math.radians(lat))
    return math.hypot(dx, dy)


def test_fnv1a_known_values():
    # Standard FNV-1a 32-bit test vectors
    assert hash_string("") == 0x811C9DC5
    assert hash_string("a") == 0xE40C292C
    assert hash_string("foobar") == 0xBF9CF968


def test_hash_is_order_sensitive():
    assert hash_string("ab") != hash_string("ba")


def test_mulberry32_draws_are_in_unit_interval():
    for seed in (0, 1, 42, 0xFFFFFFFF, hash_string("project-7")):
        draw = mulberry32(seed)
        assert 0.0 <= draw < 1.0


def test_same_arguments_give_bit_identical_output():
    first = jitter_lat_lng(30.1, -87.2, 250, "42")
    second = jitter_lat_lng(30.1, -87.2, 250, "42")
    assert first == second


def test_different_seeds_move_differently():
    assert jitter_lat_lng(30.1, -87.2, 250, "42") != jitter_lat_lng(30.1, -87.2, 250, "43")


@pytest.mark.parametrize("radius", [0, -5])
def test_non_positive_radius_is_identity(radius):
    assert jitter_lat_lng(30.1, -87.2, radius, "42") == (30.1, -87.2)


@pytest.mark.parametrize("lat,lng", [(30.1, -87.2), (0.0, 0.0), (-33.9, 151.2), (69.6, 18.9)])
@pytest.mark.parametrize("radius", [1, 150, 5000])
def test_offset_is_bounded_by_radius(lat, lng, radius):
    for i in range(200):
        jittered = jitter_lat_lng(lat, lng, radius, f"project-{i}")
        assert _offset_meters(lat, lng, *jittered) <= radius + 1e-6


def test_offset_is_not_zero_for_positive_radius():
    jittered = jitter_lat_lng(30.1, -87.2, 500, "42")
    assert jittered != (30.1, -87.2)


def test_pole_leaves_longitude_unchanged():
    lat, lng = jitter_lat_lng(90.0, 10.0, 100, "42")
    assert lng == 10.0
    assert math.isfinite(lat)


@pytest.mark.parametrize("lat", [89.99, -89.99, 90.0, -90.0])
def test_latitude_stays_on_the_globe_near_poles(lat):
    for i in range(500):
        jittered_lat, jittered_lng = jitter_lat_lng(lat, 10.0, 5000, f"project-{i}")
        assert -90.0 <= jittered_lat <= 90.0
        assert -180.0 <= jittered_lng <= 180.0


@pytest.mark.parametrize("lng", [179.999, -179.999])
def test_longitude_wraps_across_antimeridian(lng):
    wrapped = 0
    for i in range(500):
        jittered_lat, jittered_lng = jitter_lat_lng(0.0, lng, 5000, f"project-{i}")
        assert -180.0 <= jittered_lng <= 180.0
        if (jittered_lng > 0) != (lng > 0):
            wrapped += 1
    # 5 km is far wider than the 0.001 degree gap to the antimeridian
    assert wrapped > 0


def test_wrapped_longitude_keeps_offset_distance():
    lat, lng = 0.0, 179.999
    for i in range(200):
        jittered_lat, jittered_lng = jitter_lat_lng(lat, lng, 5000, f"project-{i}")
        d_lng = (jittered_lng - lng + 180.0) % 360.0 - 180.0
        assert _offset_meters(lat, 0.0, jittered_lat, d_lng) <= 5000 + 1e-6
