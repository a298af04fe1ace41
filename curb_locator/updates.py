from __future__ import annotations

import logging

from curb_locator.index import GeohashIndex
from curb_locator.models import CurbSpot

logger = logging.getLogger(__name__)


class UpdateHandler:
    """Applies reported curb changes (e.g. a new hydrant) to the index."""

    def __init__(self, index: GeohashIndex) -> None:
        self.index = index

    def apply(self, location: CurbSpot) -> None:
        created = self.index.upsert(location)
        logger.info(
            "%s curb spot %s rating=%d",
            "Created" if created else "Updated",
            location.geocode,
            location.rating,
        )
