from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from curb_locator.errors import InvalidGeocodeError

GEOCODE_LENGTH = 12
BUCKET_KEY_LENGTH = 6

# Geohash base32: digits plus lower-case letters without a, i, l, o
GEOHASH_ALPHABET = frozenset("0123456789bcdefghjkmnpqrstuvwxyz")


def validate_geocode(value: object, length: int = GEOCODE_LENGTH) -> str:
    if not isinstance(value, str):
        raise InvalidGeocodeError(value, "expected a string")
    if len(value) != length:
        raise InvalidGeocodeError(value, f"expected {length} characters, got {len(value)}")
    bad = sorted(set(value) - GEOHASH_ALPHABET)
    if bad:
        raise InvalidGeocodeError(value, f"characters outside the geohash alphabet: {''.join(bad)}")
    return value


def bucket_key_of(geocode: str) -> str:
    return geocode[:BUCKET_KEY_LENGTH]


class CurbSpot(BaseModel):
    geocode: str
    rating: int = Field(ge=0, le=10)

    @field_validator("geocode")
    @classmethod
    def _check_geocode(cls, v: str) -> str:
        return validate_geocode(v)

    @property
    def bucket_key(self) -> str:
        return bucket_key_of(self.geocode)


class SearchStatus(str, Enum):
    OK = "ok"
    FEW_RESULTS = "few_results"
    NO_RESULTS = "no_results"


class RankedSpot(BaseModel):
    spot: CurbSpot
    distance_m: float
    score: float

    def to_row(self) -> dict[str, Any]:
        return {
            **self.spot.model_dump(),
            "distance_m": float(self.distance_m),
            "score": float(self.score),
        }


class SearchResult(BaseModel):
    address: str
    status: SearchStatus
    results: list[RankedSpot] = []

    @property
    def spots(self) -> list[CurbSpot]:
        return [r.spot for r in self.results]


class SearchQuery(BaseModel):
    address: str
