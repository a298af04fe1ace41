from __future__ import annotations

import logging
from typing import Iterable

from curb_locator.geo import haversine_m
from curb_locator.models import bucket_key_of
from curb_locator.providers import (
    CARDINAL_DIRECTIONS,
    DIAGONAL_DIRECTIONS,
    GeocodeProvider,
    provider_call,
)

logger = logging.getLogger(__name__)

DEFAULT_BORDER_THRESHOLD_M = 600.0


class NeighborExpander:
    """Picks the neighbour buckets a search has to look at besides its own.

    An address close to an edge of its bucket has nearby spots on the other
    side of that edge, so those buckets are searched too. Corners count when
    both edges that meet there are close.
    """

    def __init__(
        self,
        geocoder: GeocodeProvider,
        threshold_m: float = DEFAULT_BORDER_THRESHOLD_M,
    ) -> None:
        self.geocoder = geocoder
        self.threshold_m = threshold_m

    def edge_distances(self, address: str) -> dict[str, float]:
        """Metres from the address to the n/e/s/w edges of its bucket."""
        with provider_call("geocode bounds"):
            cell = self.geocoder.bounds(address)
            bucket = self.geocoder.bounds(bucket_key_of(address))

        p = cell.center
        return {
            "n": haversine_m(p.lat, p.lon, bucket.ne.lat, p.lon),
            "e": haversine_m(p.lat, p.lon, p.lat, bucket.ne.lon),
            "s": haversine_m(p.lat, p.lon, bucket.sw.lat, p.lon),
            "w": haversine_m(p.lat, p.lon, p.lat, bucket.sw.lon),
        }

    def border_directions(self, address: str) -> tuple[str, ...]:
        distances = self.edge_distances(address)
        near = {d for d, m in distances.items() if m < self.threshold_m}

        out = [d for d in CARDINAL_DIRECTIONS if d in near]
        # "ne" needs both "n" and "e"
        out.extend(d for d in DIAGONAL_DIRECTIONS if d[0] in near and d[1] in near)
        return tuple(out)

    def expand_by_directions(self, bucket_key: str, directions: Iterable[str]) -> dict[str, str]:
        out: dict[str, str] = {}
        for d in directions:
            if d not in CARDINAL_DIRECTIONS and d not in DIAGONAL_DIRECTIONS:
                raise ValueError(f"Unknown direction: {d!r}")
            with provider_call("geocode neighbour lookup"):
                if len(d) == 1:
                    out[d] = self.geocoder.adjacent(bucket_key, d)
                else:
                    out[d] = self.geocoder.diagonal(bucket_key, d)
        return out

    def full_neighborhood(self, bucket_key: str) -> dict[str, str]:
        with provider_call("geocode neighbours"):
            return dict(self.geocoder.neighbors(bucket_key))
