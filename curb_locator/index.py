from __future__ import annotations

import logging
import threading
from typing import Iterable

from curb_locator.models import CurbSpot, bucket_key_of

logger = logging.getLogger(__name__)


class GeohashIndex:
    """Curb spots partitioned by the 6-character prefix of their geocode.

    Each bucket holds the spots of one coarse cell (~1.2 km x 0.6 km, varying
    with latitude), so a search only has to look at a handful of buckets.

    Every bucket has its own lock. ``upsert`` does its find-then-replace-or-
    append under that lock and ``lookup`` copies under it, so writers on
    different buckets never contend and readers always see whole spots.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, list[CurbSpot]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    @classmethod
    def from_spots(cls, spots: Iterable[CurbSpot]) -> "GeohashIndex":
        index = cls()
        n = 0
        for s in spots:
            index.upsert(s)
            n += 1
        logger.info(
            "Indexed %d curb spots (%d unique) into %d buckets",
            n,
            len(index),
            index.bucket_count,
        )
        return index

    def _lock_for(self, key: str) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is None:
            with self._registry_lock:
                lock = self._locks.setdefault(key, threading.Lock())
        return lock

    def lookup(self, bucket_key: str) -> list[CurbSpot]:
        """Snapshot of the spots in ``bucket_key``; empty if the bucket is absent."""
        if bucket_key not in self._buckets:
            return []
        with self._lock_for(bucket_key):
            return [s.model_copy() for s in self._buckets.get(bucket_key, ())]

    def upsert(self, spot: CurbSpot) -> bool:
        """Insert ``spot`` or replace the rating of the stored spot with its geocode.

        Returns True when a new spot was created.
        """
        key = bucket_key_of(spot.geocode)
        with self._lock_for(key):
            bucket = self._buckets.get(key)
            if bucket is None:
                self._buckets[key] = [spot.model_copy()]
                return True

            for existing in bucket:
                if existing.geocode == spot.geocode:
                    existing.rating = spot.rating
                    return False

            bucket.append(spot.model_copy())
            return True

    def get(self, geocode: str) -> CurbSpot | None:
        for s in self.lookup(bucket_key_of(geocode)):
            if s.geocode == geocode:
                return s
        return None

    def bucket_keys(self) -> list[str]:
        return list(self._buckets)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def __len__(self) -> int:
        return sum(len(self.lookup(k)) for k in self.bucket_keys())

    def __contains__(self, geocode: object) -> bool:
        return isinstance(geocode, str) and self.get(geocode) is not None
