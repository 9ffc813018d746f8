"""
Listing filter contract shared by every listing in the API.

Two call sites use it:

* ``filter_open_data`` runs the contract in memory over canonical services
  built by the open-data adapters.
* ``mongo_filter`` expresses the same predicate as a MongoDB filter for the
  persisted ``services`` / ``events`` collections. The radius search and the
  distance sort always run here in Python through ``apply_radius``, whichever
  side produced the candidates.

Both sides read their rules from ``ListingQuery``, so a change to the
contract lands in one place.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any, Callable, FrozenSet, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from compass.models.common import CompassBaseModel
from compass.utils.geo import bounding_box, haversine_miles

ALL = "all"

SERVICE_TEXT_FIELDS: Tuple[str, ...] = ("name", "description", "address")
EVENT_TEXT_FIELDS: Tuple[str, ...] = ("title", "description", "address")

DEFAULT_RADIUS_MILES = 10.0
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50

# (latitude, longitude) or None when the record has no usable position
CoordinatesOf = Callable[[Any], Optional[Tuple[float, float]]]


class ListingQuery(BaseModel):
    category: Optional[str] = None
    subcategory: Optional[str] = None
    search: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: float = Field(DEFAULT_RADIUS_MILES, gt=0)
    statuses: Optional[FrozenSet[str]] = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _origin_pair(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be supplied together")
        return self

    @property
    def origin(self) -> Optional[Tuple[float, float]]:
        if self.latitude is None:
            return None
        return self.latitude, self.longitude

    @property
    def search_term(self) -> Optional[str]:
        term = (self.search or "").strip()
        return term or None


class Pagination(CompassBaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Ranked(NamedTuple):
    record: Any
    distance: Optional[float]


class QueryResult(NamedTuple):
    items: List[Ranked]
    pagination: Pagination

    @property
    def records(self) -> list:
        return [r.record for r in self.items]


def _field(record, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _restricts(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


# -------------------------
# Predicate
# -------------------------
def matches(record, query: ListingQuery, text_fields: Sequence[str] = SERVICE_TEXT_FIELDS) -> bool:
    if _restricts(query.category) and _field(record, "category") != query.category:
        return False
    if _restricts(query.subcategory) and _field(record, "subcategory") != query.subcategory:
        return False

    if query.statuses is not None and _field(record, "status") not in query.statuses:
        return False

    term = query.search_term
    if term:
        needle = term.lower()
        if not any(needle in str(_field(record, f) or "").lower() for f in text_fields):
            return False

    return True


# -------------------------
# Geospatial
# -------------------------
def apply_radius(
    items: Iterable,
    origin: Tuple[float, float],
    radius: float,
    coordinates_of: CoordinatesOf,
) -> List[Ranked]:
    """
    Keep records within ``radius`` miles of ``origin``, nearest first.

    Records without coordinates stay in the result and sort after every
    record with a distance. ``sorted`` is stable, so equal distances keep
    their incoming order.
    """
    lat0, lng0 = origin
    ranked: List[Ranked] = []
    for item in items:
        coords = coordinates_of(item)
        if coords is None:
            ranked.append(Ranked(item, None))
            continue
        d = haversine_miles(lat0, lng0, coords[0], coords[1])
        if d > radius:
            continue
        ranked.append(Ranked(item, d))

    return sorted(ranked, key=lambda r: math.inf if r.distance is None else r.distance)


# -------------------------
# Pagination
# -------------------------
def build_pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )


def paginate(items: Sequence, page: int, limit: int) -> Tuple[list, Pagination]:
    skip = (page - 1) * limit
    return list(items[skip:skip + limit]), build_pagination(len(items), page, limit)


def run_query(
    items: Iterable,
    query: ListingQuery,
    *,
    coordinates_of: CoordinatesOf,
    text_fields: Sequence[str] = SERVICE_TEXT_FIELDS,
    prefiltered: bool = False,
) -> QueryResult:
    """
    Filter, optionally radius-sort, then paginate.

    ``prefiltered`` skips the predicate for candidates that already went
    through the equivalent ``mongo_filter``.
    """
    candidates = list(items) if prefiltered else [
        item for item in items if matches(item, query, text_fields)
    ]

    origin = query.origin
    if origin is not None:
        ranked = apply_radius(candidates, origin, query.radius, coordinates_of)
    else:
        ranked = [Ranked(item, None) for item in candidates]

    page_items, pagination = paginate(ranked, query.page, query.limit)
    return QueryResult(page_items, pagination)


# -------------------------
# Call site 1: canonical open-data services
# -------------------------
def open_data_coordinates(service) -> Optional[Tuple[float, float]]:
    coords = _field(service, "coordinates")
    if not coords:
        return None
    lng, lat = coords
    return lat, lng


def filter_open_data(services: Iterable, query: ListingQuery) -> QueryResult:
    return run_query(services, query, coordinates_of=open_data_coordinates)


# -------------------------
# Call site 2: MongoDB
# -------------------------
def mongo_filter(query: ListingQuery, text_fields: Sequence[str] = SERVICE_TEXT_FIELDS) -> dict:
    filt: dict = {}

    if query.statuses is not None:
        filt["status"] = {"$in": sorted(query.statuses)}
    if _restricts(query.category):
        filt["category"] = query.category
    if _restricts(query.subcategory):
        filt["subcategory"] = query.subcategory

    term = query.search_term
    if term:
        pattern = re.escape(term)
        filt["$or"] = [{f: {"$regex": pattern, "$options": "i"}} for f in text_fields]

    return filt


def within_radius_box(filt: dict, query: ListingQuery) -> dict:
    """
    Narrow ``filt`` to the bounding box of the radius circle.

    Documents without a position still pass, so ``apply_radius`` can keep
    them at the end of the result.
    """
    if query.origin is None:
        return filt

    box = bounding_box(query.latitude, query.longitude, query.radius)
    inside = {"latitude": {"$gte": box.min_lat, "$lte": box.max_lat}}
    if box.min_lng is not None:
        inside["longitude"] = {"$gte": box.min_lng, "$lte": box.max_lng}

    near = {"$or": [{"latitude": None}, {"longitude": None}, inside]}
    return {"$and": [filt, near]} if filt else near


def document_coordinates(doc) -> Optional[Tuple[float, float]]:
    lat, lng = _field(doc, "latitude"), _field(doc, "longitude")
    if lat is None or lng is None:
        return None
    # Decimal128 has no __float__
    return float(str(lat)), float(str(lng))
