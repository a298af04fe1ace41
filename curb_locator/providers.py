"""Geocode and distance collaborators.

The search core only talks to these through the two protocols below, so
tests and deployments can swap in their own geocoding or routing backends.
The default adapters are backed by ``pygeohash`` and a haversine distance.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol

import pygeohash as pgh

from curb_locator.errors import CurbLocatorError, InvalidGeocodeError, ProviderFailure
from curb_locator.geo import haversine_m
from curb_locator.models import GEOHASH_ALPHABET

logger = logging.getLogger(__name__)

CARDINAL_DIRECTIONS = ("n", "e", "s", "w")
DIAGONAL_DIRECTIONS = ("ne", "se", "sw", "nw")
COMPASS_DIRECTIONS = ("n", "ne", "e", "se", "s", "sw", "w", "nw")

# pygeohash names for the four edges
_LIB_DIRECTIONS = {"n": "top", "s": "bottom", "e": "right", "w": "left"}


@dataclass(frozen=True)
class LatLon:
    lat: float
    lon: float


@dataclass(frozen=True)
class Bounds:
    sw: LatLon
    ne: LatLon

    @property
    def center(self) -> LatLon:
        return LatLon((self.sw.lat + self.ne.lat) / 2.0, (self.sw.lon + self.ne.lon) / 2.0)


class GeocodeProvider(Protocol):
    def bounds(self, geocode: str) -> Bounds: ...

    def adjacent(self, bucket_key: str, direction: str) -> str: ...

    def diagonal(self, bucket_key: str, direction: str) -> str: ...

    def neighbors(self, bucket_key: str) -> dict[str, str]: ...


class DistanceProvider(Protocol):
    def distance(self, geocode_a: str, geocode_b: str) -> float: ...


@contextmanager
def provider_call(what: str) -> Iterator[None]:
    """Re-raise collaborator errors as ``ProviderFailure``.

    Our own errors (e.g. ``InvalidGeocodeError``) pass through untouched.
    """
    try:
        yield
    except CurbLocatorError:
        raise
    except Exception as e:
        logger.warning("%s failed: %s", what, e)
        raise ProviderFailure(f"{what} failed: {e}") from e


def _check_cell(geocode: object) -> str:
    if not isinstance(geocode, str) or geocode == "":
        raise InvalidGeocodeError(geocode, "expected a non-empty string")
    bad = sorted(set(geocode) - GEOHASH_ALPHABET)
    if bad:
        raise InvalidGeocodeError(geocode, f"characters outside the geohash alphabet: {''.join(bad)}")
    return geocode


class PygeohashGeocodeProvider:
    """GeocodeProvider over standard geohash cells."""

    def bounds(self, geocode: str) -> Bounds:
        lat, lon, lat_err, lon_err = pgh.decode_exactly(_check_cell(geocode))
        return Bounds(
            sw=LatLon(lat - lat_err, lon - lon_err),
            ne=LatLon(lat + lat_err, lon + lon_err),
        )

    def adjacent(self, bucket_key: str, direction: str) -> str:
        if direction not in CARDINAL_DIRECTIONS:
            raise ValueError(f"Not an adjacent direction: {direction!r}")
        return pgh.get_adjacent(_check_cell(bucket_key), _LIB_DIRECTIONS[direction])

    def diagonal(self, bucket_key: str, direction: str) -> str:
        if direction not in DIAGONAL_DIRECTIONS:
            raise ValueError(f"Not a diagonal direction: {direction!r}")
        # "ne" is one step north, then one step east
        vertical = self.adjacent(bucket_key, direction[0])
        return self.adjacent(vertical, direction[1])

    def neighbors(self, bucket_key: str) -> dict[str, str]:
        return {
            d: self.adjacent(bucket_key, d) if len(d) == 1 else self.diagonal(bucket_key, d)
            for d in COMPASS_DIRECTIONS
        }


class HaversineDistanceProvider:
    """Straight-line distance between the centres of two geocode cells."""

    def distance(self, geocode_a: str, geocode_b: str) -> float:
        lat_a, lon_a = pgh.decode(_check_cell(geocode_a))
        lat_b, lon_b = pgh.decode(_check_cell(geocode_b))
        return haversine_m(float(lat_a), float(lon_a), float(lat_b), float(lon_b))
