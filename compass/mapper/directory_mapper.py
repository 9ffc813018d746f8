from __future__ import annotations

from typing import Optional

from compass.models.common import oid_str
from compass.utils.mongo import to_float as _num


def _round_distance(distance: Optional[float]) -> Optional[float]:
    return round(distance, 3) if distance is not None else None


def to_service_out(doc: dict, distance: Optional[float] = None) -> dict:
    """
    Mongo service document -> API shape (id as str, numbers as float).
    """
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = oid_str(doc["_id"])
    out["latitude"] = _num(doc.get("latitude"))
    out["longitude"] = _num(doc.get("longitude"))
    out["languages_spoken"] = doc.get("languages_spoken") or []
    out["accessibility_features"] = doc.get("accessibility_features") or []
    out["view_count"] = doc.get("view_count", 0)
    out["distance"] = _round_distance(distance)
    return out


def to_provider_summary(doc: Optional[dict], with_contact: bool = False) -> Optional[dict]:
    if not doc:
        return None
    out = {
        "id": oid_str(doc["_id"]),
        "organization_name": doc.get("organization_name"),
    }
    if with_contact:
        out["email"] = doc.get("email")
        out["phone"] = doc.get("phone")
    return out


def to_service_brief(doc: Optional[dict]) -> Optional[dict]:
    if not doc:
        return None
    return {
        "id": oid_str(doc["_id"]),
        "name": doc.get("name"),
        "address": doc.get("address"),
        "category": doc.get("category"),
        "phone": doc.get("phone"),
        "website": doc.get("website"),
    }


def to_event_out(doc: dict, distance: Optional[float] = None, service: Optional[dict] = None) -> dict:
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = oid_str(doc["_id"])
    out["latitude"] = _num(doc.get("latitude"))
    out["longitude"] = _num(doc.get("longitude"))
    out["distance"] = _round_distance(distance)
    out["service"] = to_service_brief(service)
    return out


def to_provider_out(doc: dict, services: Optional[int] = None, events: Optional[int] = None) -> dict:
    # password_hash never leaves this layer
    out = {
        "id": oid_str(doc["_id"]),
        "email": doc.get("email"),
        "organization_name": doc.get("organization_name", ""),
        "first_name": doc.get("first_name"),
        "last_name": doc.get("last_name"),
        "phone": doc.get("phone"),
        "verified": doc.get("verified", False),
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
    }
    if services is not None or events is not None:
        out["counts"] = {"services": services or 0, "events": events or 0}
    return out


def to_admin_out(doc: dict, providers_created: Optional[int] = None) -> dict:
    return {
        "id": oid_str(doc["_id"]),
        "email": doc.get("email"),
        "first_name": doc.get("first_name"),
        "last_name": doc.get("last_name"),
        "created_at": doc.get("created_at"),
        "providers_created": providers_created,
    }
