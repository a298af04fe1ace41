from __future__ import annotations

import csv
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable

import pygeohash as pgh
import requests
from pydantic import ValidationError

from curb_locator.models import GEOCODE_LENGTH, CurbSpot

logger = logging.getLogger(__name__)

GEOCODE_KEYS = ["geocode", "geohash", "GEOHASH", "Geohash", "GEOCODE"]
RATING_KEYS = ["rating", "curb_designation", "CURB_DESIGNATION", "designation", "RATING"]
LAT_KEYS = ["lat", "latitude", "LAT", "Y"]
LON_KEYS = ["lon", "lng", "longitude", "LON", "X"]


def _ring_centroid(ring: list) -> tuple[float, float] | None:
    # ring: [[lon, lat], ...]; plain vertex average is fine at curb scale
    pts = [
        (float(p[0]), float(p[1]))
        for p in ring
        if isinstance(p, (list, tuple)) and len(p) >= 2
    ]
    if len(pts) < 3:
        return None
    if pts[0] == pts[-1]:
        pts = pts[:-1]
    return (sum(p[0] for p in pts) / len(pts), sum(p[1] for p in pts) / len(pts))


def _geom_to_point_latlon(geom: dict) -> tuple[float, float] | None:
    if not isinstance(geom, dict):
        return None

    gtype = geom.get("type")
    coords = geom.get("coordinates")

    if gtype == "Point" and isinstance(coords, (list, tuple)) and len(coords) >= 2:
        return (float(coords[1]), float(coords[0]))

    if gtype == "LineString" and isinstance(coords, list) and coords:
        # curb segments: take the midpoint vertex
        mid = coords[len(coords) // 2]
        if isinstance(mid, (list, tuple)) and len(mid) >= 2:
            return (float(mid[1]), float(mid[0]))
        return None

    if gtype == "Polygon" and isinstance(coords, list) and coords:
        c = _ring_centroid(coords[0]) if isinstance(coords[0], list) else None
        if c is None:
            return None
        lon, lat = c
        return (lat, lon)

    return None


@dataclass(frozen=True)
class LoadResult:
    spots: list[CurbSpot]
    source: str
    skipped: int = 0


def _try_parse_float(v: object) -> float | None:
    if v is None:
        return None
    if isinstance(v, (int, float)):
        return float(v)
    s = str(v).strip()
    if s == "":
        return None
    try:
        return float(s)
    except ValueError:
        return None


def _try_parse_int(v: object) -> int | None:
    f = _try_parse_float(v)
    if f is None or not f.is_integer():
        return None
    return int(f)


def _row_get(row: dict, keys: Iterable[str]) -> object | None:
    for k in keys:
        if k in row and row[k] not in (None, ""):
            return row[k]
    return None


def _normalize_spot(row: dict, idx: int) -> CurbSpot | None:
    rating = _try_parse_int(_row_get(row, RATING_KEYS))
    if rating is None:
        return None

    geocode = _row_get(row, GEOCODE_KEYS)
    if geocode is None:
        lat = _try_parse_float(_row_get(row, LAT_KEYS))
        lon = _try_parse_float(_row_get(row, LON_KEYS))
        if lat is None or lon is None:
            return None
        geocode = pgh.encode(lat, lon, precision=GEOCODE_LENGTH)

    try:
        return CurbSpot(geocode=str(geocode).strip(), rating=rating)
    except ValidationError as e:
        logger.debug("Skipping row %d: %s", idx, e.errors()[0].get("msg"))
        return None


def _spots_from_rows(rows: Iterable[Any], source: str) -> LoadResult:
    spots: list[CurbSpot] = []
    skipped = 0
    for idx, row in enumerate(rows):
        s = _normalize_spot(row, idx) if isinstance(row, dict) else None
        if s is None:
            skipped += 1
            continue
        spots.append(s)
    if skipped:
        logger.warning("Skipped %d malformed curb rows from %s", skipped, source)
    return LoadResult(spots=spots, source=source, skipped=skipped)


def _feature_rows(features: list) -> Iterable[dict]:
    for feat in features:
        if not isinstance(feat, dict):
            yield {}
            continue
        row = dict(feat.get("properties") or {})
        ll = _geom_to_point_latlon(feat.get("geometry") or {})
        if ll is not None:
            lat, lon = ll
            row.setdefault("lat", lat)
            row.setdefault("lon", lon)
        yield row


def spots_from_document(obj: object, source: str) -> LoadResult:
    if isinstance(obj, dict) and "features" in obj:
        # GeoJSON FeatureCollection
        return _spots_from_rows(_feature_rows(obj.get("features") or []), source)

    if isinstance(obj, list):
        return _spots_from_rows(obj, source)

    raise ValueError(f"Unsupported JSON structure in {source}")


def load_spots_from_file(path: str) -> LoadResult:
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Curb spot cache file not found: {path}. "
            f"Put a CSV/GeoJSON/JSON file there or set a source URL."
        )

    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            return _spots_from_rows(csv.DictReader(f), path)

    if ext in (".json", ".geojson"):
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
        return spots_from_document(obj, path)

    raise ValueError(f"Unsupported file extension: {ext} (expected .csv/.json/.geojson)")


def fetch_spots_from_url(url: str, timeout: float = 10.0) -> LoadResult:
    headers = {"User-Agent": "CurbLocator/1.0", "Accept": "application/json"}
    r = requests.get(url, headers=headers, timeout=timeout)
    r.raise_for_status()
    return spots_from_document(r.json(), url)
