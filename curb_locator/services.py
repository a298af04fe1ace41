from __future__ import annotations

import logging
from typing import Iterable

from curb_locator.config import Settings
from curb_locator.data_loader import LoadResult, fetch_spots_from_url, load_spots_from_file
from curb_locator.index import GeohashIndex
from curb_locator.models import CurbSpot, SearchResult
from curb_locator.neighbors import NeighborExpander
from curb_locator.providers import (
    DistanceProvider,
    GeocodeProvider,
    HaversineDistanceProvider,
    PygeohashGeocodeProvider,
)
from curb_locator.search import SearchEngine
from curb_locator.updates import UpdateHandler

logger = logging.getLogger(__name__)


class CurbLocator:
    """One city's curb spots, searchable and updatable from many threads."""

    def __init__(
        self,
        index: GeohashIndex,
        settings: Settings | None = None,
        geocoder: GeocodeProvider | None = None,
        distances: DistanceProvider | None = None,
    ) -> None:
        settings = settings or Settings()
        geocoder = geocoder or PygeohashGeocodeProvider()
        distances = distances or HaversineDistanceProvider()

        self.index = index
        self.settings = settings
        self.engine = SearchEngine(
            index,
            geocoder,
            distances,
            NeighborExpander(geocoder, threshold_m=settings.border_threshold_m),
            result_limit=settings.result_limit,
            comfort_radius_m=settings.comfort_radius_m,
            distance_workers=settings.distance_workers,
            provider_timeout_s=settings.provider_timeout_s,
        )
        self.updates = UpdateHandler(index)

    @classmethod
    def from_spots(cls, spots: Iterable[CurbSpot], **kwargs) -> "CurbLocator":
        return cls(GeohashIndex.from_spots(spots), **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "CurbLocator":
        result = load_initial_spots(settings)
        logger.info("Loaded %d curb spots from %s", len(result.spots), result.source)
        return cls.from_spots(result.spots, settings=settings, **kwargs)

    def search(self, address: str) -> SearchResult:
        return self.engine.search(address)

    def update(self, location: CurbSpot) -> None:
        self.updates.apply(location)

    def get(self, geocode: str) -> CurbSpot | None:
        return self.index.get(geocode)

    def close(self) -> None:
        self.engine.close()

    @property
    def spot_count(self) -> int:
        return len(self.index)

    @property
    def bucket_count(self) -> int:
        return self.index.bucket_count


def load_initial_spots(settings: Settings) -> LoadResult:
    if settings.curb_spot_source_url:
        return fetch_spots_from_url(settings.curb_spot_source_url)
    return load_spots_from_file(settings.curb_spot_cache_path)
