from __future__ import annotations

import os

from pydantic import BaseModel

ENV_PREFIX = "CURB_LOCATOR_"


class Settings(BaseModel):
    # Optional HTTP(S) URL serving the initial curb dataset as JSON/GeoJSON.
    # When unset we load from the local cache file below.
    curb_spot_source_url: str | None = None

    # Local cache path (CSV/GeoJSON/JSON)
    curb_spot_cache_path: str = "curb_spots.json"

    # Edges of the address's bucket closer than this pull in the neighbour bucket
    border_threshold_m: float = 600.0

    # Walking distance treated as 100 on the normalised distance scale
    comfort_radius_m: float = 1000.0

    result_limit: int = 10

    # Thread pool size for per-candidate distance calls; 1 keeps them sequential
    distance_workers: int = 8

    # Upper bound on one search's distance calls; 0 disables the timeout
    provider_timeout_s: float = 5.0

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        overrides: dict[str, str] = {}
        for name in cls.model_fields:
            value = os.getenv(ENV_PREFIX + name.upper())
            if value is not None and value.strip() != "":
                overrides[name] = value.strip()
        return cls(**overrides)


settings = Settings.from_env()
