import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from curb_locator.config import settings
from curb_locator.errors import InvalidGeocodeError, ProviderFailure
from curb_locator.models import CurbSpot, SearchQuery
from curb_locator.services import CurbLocator

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Curb Locator API", version="0.1.0")

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state, built once at startup
locator: Optional[CurbLocator] = None


@app.on_event("startup")
def load_data():
    global locator
    try:
        locator = CurbLocator.from_settings(settings)
    except (OSError, ValueError) as e:
        logger.error("Error loading curb data: %s", e)


@app.on_event("shutdown")
def close_locator():
    if locator is not None:
        locator.close()


@app.exception_handler(InvalidGeocodeError)
def invalid_geocode_handler(request: Request, exc: InvalidGeocodeError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ProviderFailure)
def provider_failure_handler(request: Request, exc: ProviderFailure) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def _require_locator() -> CurbLocator:
    if locator is None:
        raise HTTPException(status_code=503, detail="Curb data not loaded")
    return locator


@app.get("/health")
def health():
    return {
        "status": "ok",
        "spots_loaded": locator.spot_count if locator else 0,
        "buckets": locator.bucket_count if locator else 0,
    }


@app.post("/spots/search", response_model=dict)
def search_spots(query: SearchQuery) -> dict[str, Any]:
    """
    Rank the best pickup curbs around a 12-character geocode.

    - **address**: geocode of the drop-off address
    - **status**: `ok`, `few_results` (fewer than 10 found) or `no_results`
    """
    result = _require_locator().search(query.address)
    return {
        "address": result.address,
        "status": result.status.value,
        "results": [r.to_row() for r in result.results],
    }


@app.put("/spots", status_code=204)
def update_spot(spot: CurbSpot) -> Response:
    """Insert a curb spot or change the rating of an existing one."""
    _require_locator().update(spot)
    return Response(status_code=204)


# Development helper: inspect a single stored spot
@app.get("/spots/{geocode}", response_model=CurbSpot)
def get_spot(geocode: str) -> CurbSpot:
    spot = _require_locator().get(geocode)
    if spot is None:
        raise HTTPException(status_code=404, detail=f"No curb spot at {geocode}")
    return spot
