"""
Shared pytest fixtures for the curb locator test suite.

The grid geocoder lays nine 6-character buckets out on a 3x3 grid of
0.02 x 0.02 degree cells at the equator (~2.2 km per side), with bucket
"9q8yyk" in the middle. Address positions are registered explicitly, which
makes border distances easy to reason about.
"""

import time

import pytest

from curb_locator.index import GeohashIndex
from curb_locator.models import CurbSpot
from curb_locator.providers import COMPASS_DIRECTIONS, Bounds, LatLon

CELL_DEG = 0.02

CENTER_KEY = "9q8yyk"

GRID_KEYS = {
    (1, -1): "9q8yym", (1, 0): "9q8yyt", (1, 1): "9q8yyv",
    (0, -1): "9q8yyh", (0, 0): "9q8yyk", (0, 1): "9q8yys",
    (-1, -1): "9q8yy5", (-1, 0): "9q8yy7", (-1, 1): "9q8yye",
}

_STEPS = {
    "n": (1, 0), "ne": (1, 1), "e": (0, 1), "se": (-1, 1),
    "s": (-1, 0), "sw": (-1, -1), "w": (0, -1), "nw": (1, -1),
}

# Addresses inside CENTER_KEY and their (lat, lon)
ADDRESS_POINTS = {
    "9q8yykcenter": (0.010, 0.010),  # >1 km from every edge
    "9q8yyksw0000": (0.003, 0.004),  # near south and west edges
    "9q8yykne0000": (0.018, 0.017),  # near north and east edges
    "9q8yykn00000": (0.017, 0.010),  # near north edge only
}


class GridGeocodeProvider:
    def __init__(self, points=None):
        self.points = dict(ADDRESS_POINTS if points is None else points)
        self.cells = {v: k for k, v in GRID_KEYS.items()}

    def bounds(self, geocode):
        if len(geocode) == 6:
            row, col = self.cells[geocode]
            return Bounds(
                sw=LatLon(row * CELL_DEG, col * CELL_DEG),
                ne=LatLon((row + 1) * CELL_DEG, (col + 1) * CELL_DEG),
            )
        lat, lon = self.points[geocode]
        return Bounds(sw=LatLon(lat - 1e-6, lon - 1e-6), ne=LatLon(lat + 1e-6, lon + 1e-6))

    def _step(self, bucket_key, direction):
        row, col = self.cells[bucket_key]
        d_row, d_col = _STEPS[direction]
        return GRID_KEYS[(row + d_row, col + d_col)]

    def adjacent(self, bucket_key, direction):
        assert len(direction) == 1
        return self._step(bucket_key, direction)

    def diagonal(self, bucket_key, direction):
        assert len(direction) == 2
        return self._step(bucket_key, direction)

    def neighbors(self, bucket_key):
        return {d: self._step(bucket_key, d) for d in COMPASS_DIRECTIONS}


class StubDistanceProvider:
    """Fixed distances per spot geocode; everything else is ``default`` metres away."""

    def __init__(self, by_geocode=None, default=100.0):
        self.by_geocode = dict(by_geocode or {})
        self.default = default
        self.calls = 0

    def distance(self, geocode_a, geocode_b):
        self.calls += 1
        return self.by_geocode.get(geocode_b, self.default)


class FailingDistanceProvider:
    def distance(self, geocode_a, geocode_b):
        raise RuntimeError("routing backend unavailable")


class SlowDistanceProvider:
    def __init__(self, delay_s=0.5):
        self.delay_s = delay_s

    def distance(self, geocode_a, geocode_b):
        time.sleep(self.delay_s)
        return 10.0


def spot_code(bucket_key, n):
    """A well-formed 12-character geocode inside ``bucket_key``."""
    return f"{bucket_key}{n:06d}"


@pytest.fixture
def grid_geocoder():
    return GridGeocodeProvider()


@pytest.fixture
def stub_distances():
    return StubDistanceProvider()


@pytest.fixture
def failing_distances():
    return FailingDistanceProvider()


@pytest.fixture
def slow_distances():
    return SlowDistanceProvider()


@pytest.fixture
def empty_index():
    return GeohashIndex()


@pytest.fixture
def make_spot():
    def _make(bucket_key=CENTER_KEY, n=1, rating=5):
        return CurbSpot(geocode=spot_code(bucket_key, n), rating=rating)
    return _make


def assert_index_invariants(index):
    """Every spot sits in the bucket of its own prefix and no geocode repeats."""
    seen = set()
    for key in index.bucket_keys():
        for s in index.lookup(key):
            assert s.geocode[:6] == key, f"{s.geocode} stored under {key}"
            assert s.geocode not in seen, f"duplicate geocode {s.geocode}"
            seen.add(s.geocode)
