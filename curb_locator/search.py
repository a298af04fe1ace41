from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait

from curb_locator.errors import ProviderFailure
from curb_locator.index import GeohashIndex
from curb_locator.models import (
    CurbSpot,
    RankedSpot,
    SearchResult,
    SearchStatus,
    bucket_key_of,
    validate_geocode,
)
from curb_locator.neighbors import NeighborExpander
from curb_locator.providers import DistanceProvider, GeocodeProvider, provider_call
from curb_locator.scoring import COMFORT_RADIUS_M, score

logger = logging.getLogger(__name__)

RESULT_LIMIT = 10


class SearchEngine:
    """Ranks the curb spots around an address.

    A search reads the address's own bucket, the neighbour buckets whose
    shared edge is close to the address, and, when that still yields fewer
    than ``result_limit`` spots, every remaining neighbour. Each candidate is
    scored once and the stable sort keeps discovery order for equal scores.
    """

    def __init__(
        self,
        index: GeohashIndex,
        geocoder: GeocodeProvider,
        distances: DistanceProvider,
        expander: NeighborExpander | None = None,
        *,
        result_limit: int = RESULT_LIMIT,
        comfort_radius_m: float = COMFORT_RADIUS_M,
        distance_workers: int = 8,
        provider_timeout_s: float | None = 5.0,
    ) -> None:
        self.index = index
        self.geocoder = geocoder
        self.distances = distances
        self.expander = expander or NeighborExpander(geocoder)
        self.result_limit = result_limit
        self.comfort_radius_m = comfort_radius_m
        self.distance_workers = max(1, int(distance_workers))
        self.provider_timeout_s = provider_timeout_s or None
        # Shared by all searches; a hung provider can hold at most this many threads
        self._executor = ThreadPoolExecutor(
            max_workers=self.distance_workers,
            thread_name_prefix="curb-distance",
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def search(self, address: str) -> SearchResult:
        validate_geocode(address)
        key = bucket_key_of(address)

        visited = {key}
        candidates = self.index.lookup(key)
        logger.debug("search %s: bucket %s has %d spots", address, key, len(candidates))

        directions = self.expander.border_directions(address)
        for nkey in self.expander.expand_by_directions(key, directions).values():
            self._collect(nkey, visited, candidates)
        logger.debug(
            "search %s: border directions %s -> %d candidates",
            address,
            ",".join(directions) or "-",
            len(candidates),
        )

        if len(candidates) < self.result_limit:
            for d, nkey in self.expander.full_neighborhood(key).items():
                if d in directions:
                    continue
                self._collect(nkey, visited, candidates)
            logger.debug("search %s: widened to %d candidates", address, len(candidates))

        ranked = self.rank(address, candidates)

        if len(ranked) >= self.result_limit:
            status = SearchStatus.OK
        elif ranked:
            status = SearchStatus.FEW_RESULTS
        else:
            status = SearchStatus.NO_RESULTS

        return SearchResult(address=address, status=status, results=ranked[: self.result_limit])

    def _collect(self, bucket_key: str, visited: set[str], candidates: list[CurbSpot]) -> None:
        # Neighbour keys can coincide near the poles and the antimeridian
        if bucket_key in visited:
            return
        visited.add(bucket_key)
        candidates.extend(self.index.lookup(bucket_key))

    def rank(self, address: str, candidates: list[CurbSpot]) -> list[RankedSpot]:
        distances = self._distances(address, candidates)
        rows = [
            RankedSpot(
                spot=c,
                distance_m=d,
                score=score(d, c.rating, comfort_radius_m=self.comfort_radius_m),
            )
            for c, d in zip(candidates, distances)
        ]
        rows.sort(key=lambda r: r.score)
        return rows

    def _distances(self, address: str, candidates: list[CurbSpot]) -> list[float]:
        if not candidates:
            return []

        futures = [
            self._executor.submit(self.distances.distance, address, c.geocode) for c in candidates
        ]
        _, pending = wait(futures, timeout=self.provider_timeout_s)
        if pending:
            # Drop queued calls; running ones finish on the pool's own threads
            for f in pending:
                f.cancel()
            logger.warning(
                "distance provider timed out after %ss (%d of %d calls pending)",
                self.provider_timeout_s,
                len(pending),
                len(futures),
            )
            raise ProviderFailure(f"distance provider timed out after {self.provider_timeout_s}s")

        out: list[float] = []
        with provider_call("distance provider"):
            for f in futures:
                out.append(float(f.result()))

        for c, d in zip(candidates, out):
            if d < 0:
                raise ProviderFailure(f"distance provider returned {d} for {c.geocode}")
        return out
