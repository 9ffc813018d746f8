from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException

from compass.mapper.directory_mapper import to_event_out, to_provider_summary
from compass.models.common import parse_oid
from compass.repositories.event_repository import SOONEST_FIRST, EventRepository
from compass.repositories.provider_repository import ProviderRepository
from compass.repositories.service_repository import ServiceRepository
from compass.schemas.event import EventCreate, EventUpdate
from compass.services.audit_service import AuditService, provider_actor
from compass.services.query_engine import (
    EVENT_TEXT_FIELDS,
    ListingQuery,
    QueryResult,
    Ranked,
    build_pagination,
    document_coordinates,
    mongo_filter,
    run_query,
    within_radius_box,
)

logger = logging.getLogger(__name__)


def _not_found() -> HTTPException:
    return HTTPException(404, "Event not found")


async def _owned_event(repo: EventRepository, event_id: str, provider: dict, action: str) -> dict:
    oid = parse_oid(event_id)
    doc = await repo.get(oid) if oid else None
    if not doc:
        raise _not_found()
    if doc.get("provider_id") != provider["id"]:
        raise HTTPException(403, f"Not authorized to {action} this event")
    return doc


async def _event_filter(
    db,
    query: ListingQuery,
    service_id: Optional[str],
    start_from: Optional[datetime],
    start_to: Optional[datetime],
) -> Optional[dict]:
    # events carry no category of their own; it comes from the linked service
    service_query = query.model_copy(update={"search": None, "statuses": None})
    service_filt = mongo_filter(service_query)

    base = query.model_copy(update={"category": None, "subcategory": None})
    filt = mongo_filter(base, EVENT_TEXT_FIELDS)

    if service_filt:
        ids = await ServiceRepository.from_db(db).ids_matching(service_filt)
        if service_id:
            ids = [i for i in ids if i == service_id]
        if not ids:
            return None
        filt["service_id"] = {"$in": ids}
    elif service_id:
        filt["service_id"] = service_id

    if start_from or start_to:
        filt["start_date"] = {}
        if start_from:
            filt["start_date"]["$gte"] = start_from
        if start_to:
            filt["start_date"]["$lte"] = start_to
    return filt


async def query_events(
    db,
    query: ListingQuery,
    service_id: Optional[str] = None,
    start_from: Optional[datetime] = None,
    start_to: Optional[datetime] = None,
) -> QueryResult:
    filt = await _event_filter(db, query, service_id, start_from, start_to)
    if filt is None:
        return QueryResult([], build_pagination(0, query.page, query.limit))

    repo = EventRepository.from_db(db)
    if query.origin is None:
        total = await repo.count(filt)
        skip = (query.page - 1) * query.limit
        docs = await repo.find(filt, SOONEST_FIRST, skip=skip, limit=query.limit)
        return QueryResult(
            [Ranked(d, None) for d in docs],
            build_pagination(total, query.page, query.limit),
        )

    docs = await repo.find(within_radius_box(filt, query), SOONEST_FIRST)
    return run_query(
        docs, query,
        coordinates_of=document_coordinates,
        text_fields=EVENT_TEXT_FIELDS,
        prefiltered=True,
    )


async def list_events(db, query: ListingQuery, **kwargs) -> dict:
    result = await query_events(db, query, **kwargs)
    services = await ServiceRepository.from_db(db).summaries(
        [r.record["service_id"] for r in result.items if r.record.get("service_id")]
    )
    return {
        "events": [
            to_event_out(r.record, r.distance, services.get(r.record.get("service_id")))
            for r in result.items
        ],
        "pagination": result.pagination,
    }


async def get_event(db, event_id: str) -> dict:
    oid = parse_oid(event_id)
    doc = await EventRepository.from_db(db).get(oid) if oid else None
    if not doc:
        raise _not_found()

    service = None
    if doc.get("service_id"):
        service = await ServiceRepository.from_db(db).get(parse_oid(doc["service_id"]))
    provider = await ProviderRepository.from_db(db).get(parse_oid(doc.get("provider_id")))

    out = to_event_out(doc, service=service)
    out["provider"] = to_provider_summary(provider, with_contact=True)
    return out


async def create_event(db, provider: dict, body: EventCreate) -> dict:
    data = body.model_dump(exclude_none=True, mode="python")
    data["provider_id"] = provider["id"]
    data["status"] = body.status.value
    if body.location_type is not None:
        data["location_type"] = body.location_type.value

    doc = await EventRepository.from_db(db).create(data)
    logger.info("Event %s created by provider %s", doc["_id"], provider["id"])

    await AuditService.from_db(db).log_event(
        "event.create",
        provider_actor(provider),
        {"type": "event", "id": str(doc["_id"])},
        f"Event created ({doc['title']})",
    )

    service = None
    if doc.get("service_id"):
        service = await ServiceRepository.from_db(db).get(parse_oid(doc["service_id"]))
    return to_event_out(doc, service=service)


def _enum_values(updates: dict) -> dict:
    return {k: getattr(v, "value", v) for k, v in updates.items()}


async def update_event(db, provider: dict, event_id: str, body: EventUpdate) -> dict:
    repo = EventRepository.from_db(db)
    old = await _owned_event(repo, event_id, provider, "update")

    updates = _enum_values(body.model_dump(exclude_unset=True))
    if "title" in updates and not updates["title"]:
        updates.pop("title")
    if "start_date" in updates and updates["start_date"] is None:
        updates.pop("start_date")
    if "status" in updates and updates["status"] is None:
        updates.pop("status")

    doc = await repo.update(old["_id"], updates) if updates else old
    if not doc:
        raise _not_found()

    if updates:
        await AuditService.from_db(db).log_event(
            "event.update",
            provider_actor(provider),
            {"type": "event", "id": event_id},
            f"Event updated ({doc['title']})",
            {"fields": sorted(updates)},
        )

    service = None
    if doc.get("service_id"):
        service = await ServiceRepository.from_db(db).get(parse_oid(doc["service_id"]))
    return to_event_out(doc, service=service)


async def delete_event(db, provider: dict, event_id: str) -> None:
    repo = EventRepository.from_db(db)
    old = await _owned_event(repo, event_id, provider, "delete")
    await repo.delete(old["_id"])

    await AuditService.from_db(db).log_event(
        "event.delete",
        provider_actor(provider),
        {"type": "event", "id": event_id},
        f"Event deleted ({old.get('title')})",
    )


async def events_for_provider(db, provider_id: str) -> list:
    repo = EventRepository.from_db(db)
    docs = await repo.list_by_provider(provider_id)
    services = await ServiceRepository.from_db(db).summaries(
        [d["service_id"] for d in docs if d.get("service_id")]
    )
    return [to_event_out(d, service=services.get(d.get("service_id"))) for d in docs]
