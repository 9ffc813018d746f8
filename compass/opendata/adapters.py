"""
Source adapters for the Chicago Data Portal feeds.

Every feed returns a JSON array of objects with its own field names. One
``SourceAdapter`` describes one feed: which fields must be present, where
the name and address parts live, and how the location is encoded. Socrata
publishes locations either as a ``{"latitude", "longitude"}`` mapping or as
a GeoJSON point whose ``coordinates`` are ``[longitude, latitude]``.

``SourceAdapter.transform`` turns one raw record into an ``OpenDataService``
or a ``Rejection``. Rejections never raise; they are logged and handed back
to the caller.
"""
from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Tuple

from compass.schemas.open_data import (
    HOURS_NOT_AVAILABLE,
    PHONE_NOT_AVAILABLE,
    OpenDataService,
    Rejection,
)
from compass.utils.geo import parse_lat_lng

logger = logging.getLogger(__name__)

NESTED = "nested"
PAIR = "pair"

Extractor = Callable[[Mapping], Optional[str]]


class TransformResult(NamedTuple):
    service: Optional[OpenDataService]
    rejection: Optional[Rejection]


# -------------------------
# Field helpers
# -------------------------
def _text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return str(value)


def _field(name: str) -> Extractor:
    return lambda raw: _text(raw.get(name))


def _fixed(text: str) -> Extractor:
    return lambda raw: text


def _field_or(name: str, default: str) -> Extractor:
    return lambda raw: _text(raw.get(name)) or default


def _no_website(raw: Mapping) -> Optional[str]:
    return None


def _website_url(raw: Mapping) -> Optional[str]:
    # plain string on some feeds, {"url": ...} on others
    value = raw.get("website")
    if isinstance(value, Mapping):
        return _text(value.get("url"))
    return _text(value)


def _warming_description(raw: Mapping) -> str:
    site_type = _text(raw.get("site_type"))
    return f"{site_type} Warming Center" if site_type else "Warming Center"


def _flu_shot_hours(raw: Mapping) -> Optional[str]:
    begin, end = _text(raw.get("begin_time")), _text(raw.get("end_time"))
    if begin and end:
        return f"{begin} - {end}"
    return None


def _flu_shot_website(raw: Mapping) -> Optional[str]:
    notes = _text(raw.get("notes"))
    if notes and "http" in notes:
        return notes
    return None


def format_address(*parts: Optional[str]) -> str:
    return ", ".join(p for p in (_text(x) for x in parts) if p)


def canonical_id(key: str, name: str, address: str, lat: float, lng: float) -> str:
    """`<adapter key>:<digest>`, stable across fetches and unique per site.

    Chains publish many sites under one name, so the digest covers the
    address and position too.
    """
    fingerprint = f"{name}|{address}|{lat:.6f}|{lng:.6f}"
    return f"{key}:{hashlib.sha1(fingerprint.encode('utf-8')).hexdigest()[:16]}"


# -------------------------
# Adapter descriptor
# -------------------------
@dataclass(frozen=True)
class SourceAdapter:
    key: str
    dataset: str
    category: str
    subcategory: str
    name_field: str
    required_fields: Tuple[str, ...]
    coordinates: str
    description: Extractor
    street_field: str = "address"
    zip_field: str = "zip"
    default_city: Optional[str] = None
    default_state: Optional[str] = None
    hours: Extractor = _field("hours_of_operation")
    website: Extractor = _no_website

    def url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.dataset}.json"

    def _reject(self, reason: str, raw) -> TransformResult:
        logger.warning("%s: rejected record (%s)", self.key, reason)
        record = dict(raw) if isinstance(raw, Mapping) else {"value": raw}
        return TransformResult(None, Rejection(source=self.key, reason=reason, record=record))

    def extract_coordinates(self, raw: Mapping) -> Optional[Tuple[float, float]]:
        """(latitude, longitude) from the feed's location field, or None."""
        location = raw.get("location")
        if not isinstance(location, Mapping):
            return None

        if self.coordinates == NESTED:
            return parse_lat_lng(location.get("latitude"), location.get("longitude"))

        pair = location.get("coordinates")
        if isinstance(pair, (str, bytes)) or not isinstance(pair, Sequence) or len(pair) != 2:
            return None
        lng, lat = pair
        return parse_lat_lng(lat, lng)

    def transform(self, raw: Any) -> TransformResult:
        if not isinstance(raw, Mapping):
            return self._reject("record is not an object", raw)

        missing = [f for f in self.required_fields if not raw.get(f)]
        if missing:
            return self._reject(f"missing required fields: {', '.join(missing)}", raw)

        name = _text(raw.get(self.name_field))
        if not name:
            return self._reject(f"missing required fields: {self.name_field}", raw)

        coords = self.extract_coordinates(raw)
        if coords is None:
            location = raw.get("location")
            return self._reject(f"invalid coordinates for {name}: location={location!r}", raw)
        lat, lng = coords

        address = format_address(
            raw.get(self.street_field),
            raw.get("city") or self.default_city,
            raw.get("state") or self.default_state,
            raw.get(self.zip_field),
        )

        service = OpenDataService(
            id=canonical_id(self.key, name, address, lat, lng),
            name=name,
            description=self.description(raw),
            category=self.category,
            subcategory=self.subcategory,
            coordinates=(lng, lat),
            address=address,
            hours=self.hours(raw) or HOURS_NOT_AVAILABLE,
            phone=_text(raw.get("phone")) or PHONE_NOT_AVAILABLE,
            website=self.website(raw),
        )
        return TransformResult(service, None)


def transform_records(
    adapter: SourceAdapter, records: Iterable[Any]
) -> Tuple[List[OpenDataService], List[Rejection]]:
    services: List[OpenDataService] = []
    rejections: List[Rejection] = []
    for raw in records:
        result = adapter.transform(raw)
        if result.service is not None:
            services.append(result.service)
        else:
            rejections.append(result.rejection)
    return services, rejections


# -------------------------
# Chicago Data Portal feeds
# -------------------------
CHICAGO_ADAPTERS: Tuple[SourceAdapter, ...] = (
    SourceAdapter(
        key="workforceCenters",
        dataset="cs4s-nsna",
        category="employment",
        subcategory="workforce",
        name_field="site_name",
        required_fields=("site_name", "address", "location"),
        coordinates=NESTED,
        description=_fixed("Workforce Center"),
        website=_website_url,
    ),
    SourceAdapter(
        key="seniorCenters",
        dataset="qhfc-4cw2",
        category="senior",
        subcategory="centers",
        name_field="site_name",
        required_fields=("site_name", "address", "location"),
        coordinates=NESTED,
        description=_field_or("program", "Senior Center"),
    ),
    SourceAdapter(
        key="healthCenters",
        dataset="mw69-m6xi",
        category="healthcare",
        subcategory="clinics",
        name_field="site_name",
        required_fields=("site_name", "address", "location"),
        coordinates=NESTED,
        description=_field_or("services", "Neighborhood Health Center"),
        website=_website_url,
    ),
    SourceAdapter(
        key="cdphClinics",
        dataset="kcki-hnch",
        category="healthcare",
        subcategory="clinics",
        name_field="clinic_name",
        required_fields=("clinic_name", "address", "location"),
        coordinates=NESTED,
        description=_fixed("CDPH Clinic"),
        website=_website_url,
    ),
    SourceAdapter(
        key="libraries",
        dataset="x8fc-8rcq",
        category="education",
        subcategory="libraries",
        name_field="branch_",
        required_fields=("branch_", "address", "location"),
        coordinates=NESTED,
        description=_fixed("Public Library"),
        hours=_field("service_hours"),
        website=_website_url,
    ),
    SourceAdapter(
        key="warmingCenters",
        dataset="h243-v2q5",
        category="shelter",
        subcategory="warming",
        name_field="site_name",
        required_fields=("site_name", "address", "location"),
        coordinates=PAIR,
        description=_warming_description,
    ),
    SourceAdapter(
        key="fluShots",
        dataset="j8c5-wxd5",
        category="healthcare",
        subcategory="vaccines",
        name_field="facility_name",
        required_fields=("facility_name", "street1", "location"),
        coordinates=PAIR,
        description=_fixed("Flu Shot Location"),
        street_field="street1",
        zip_field="postal_code",
        hours=_flu_shot_hours,
        website=_flu_shot_website,
    ),
    SourceAdapter(
        key="groceryStores",
        dataset="3e26-zek2",
        category="food",
        subcategory="grocery",
        name_field="store_name",
        required_fields=("store_name", "address", "location"),
        coordinates=PAIR,
        description=_fixed("Grocery Store"),
        default_city="Chicago",
        default_state="IL",
        hours=lambda raw: None,
    ),
)
