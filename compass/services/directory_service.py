from __future__ import annotations

import logging

from fastapi import HTTPException

from compass.core.enums import ServiceStatus
from compass.mapper.directory_mapper import to_event_out, to_provider_summary, to_service_out
from compass.models.common import parse_oid
from compass.repositories.event_repository import EventRepository
from compass.repositories.provider_repository import ProviderRepository
from compass.repositories.service_repository import NEWEST_FIRST, ServiceRepository
from compass.schemas.event import EventOut
from compass.schemas.service import ServiceCreate, ServiceUpdate
from compass.services.audit_service import AuditService, admin_actor, provider_actor
from compass.services.query_engine import (
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
    return HTTPException(404, "Service not found")


async def _owned_service(repo: ServiceRepository, service_id: str, provider: dict, action: str) -> dict:
    oid = parse_oid(service_id)
    doc = await repo.get(oid) if oid else None
    if not doc:
        raise _not_found()
    if doc.get("provider_id") != provider["id"]:
        raise HTTPException(403, f"Not authorized to {action} this service")
    return doc


# ------------------------------------------------------------------
# Listing
# ------------------------------------------------------------------
async def query_services(db, query: ListingQuery) -> QueryResult:
    repo = ServiceRepository.from_db(db)
    filt = mongo_filter(query)

    if query.origin is None:
        total = await repo.count(filt)
        skip = (query.page - 1) * query.limit
        docs = await repo.find(filt, NEWEST_FIRST, skip=skip, limit=query.limit)
        return QueryResult(
            [Ranked(d, None) for d in docs],
            build_pagination(total, query.page, query.limit),
        )

    # the box trims the candidates; the exact radius cut happens after the
    # store query, so paging must too
    docs = await repo.find(within_radius_box(filt, query), NEWEST_FIRST)
    return run_query(docs, query, coordinates_of=document_coordinates, prefiltered=True)


async def list_services(db, query: ListingQuery) -> dict:
    result = await query_services(db, query)
    return {
        "services": [to_service_out(r.record, r.distance) for r in result.items],
        "pagination": result.pagination,
    }


# ------------------------------------------------------------------
# Detail (counts a view)
# ------------------------------------------------------------------
async def get_service(db, service_id: str) -> dict:
    oid = parse_oid(service_id)
    if oid is None:
        raise _not_found()

    doc = await ServiceRepository.from_db(db).get_and_count_view(oid)
    if not doc:
        raise _not_found()

    provider = await ProviderRepository.from_db(db).get(parse_oid(doc.get("provider_id")))
    events = await EventRepository.from_db(db).upcoming_for_service(service_id)

    out = to_service_out(doc)
    out["provider"] = to_provider_summary(provider, with_contact=True)
    out["events"] = [
        EventOut.model_validate(to_event_out(e)).model_dump(by_alias=True, mode="json")
        for e in events
    ]
    return out


# ------------------------------------------------------------------
# Mutations
# ------------------------------------------------------------------
async def create_service(db, provider: dict, body: ServiceCreate) -> dict:
    data = body.model_dump(exclude_none=True, exclude={"status"})
    data.update({
        "provider_id": provider["id"],
        # new services need approval, whatever the payload says
        "status": ServiceStatus.pending.value,
        "view_count": 0,
    })
    doc = await ServiceRepository.from_db(db).create(data)
    logger.info("Service %s created by provider %s (pending)", doc["_id"], provider["id"])

    await AuditService.from_db(db).log_event(
        "service.create",
        provider_actor(provider),
        {"type": "service", "id": str(doc["_id"])},
        f"Service created ({doc['name']})",
        {"status": doc["status"]},
    )

    out = to_service_out(doc)
    out["provider"] = to_provider_summary(
        {"_id": provider["id"], "organization_name": provider.get("organization_name")}
    )
    return out


async def update_service(db, provider: dict, service_id: str, body: ServiceUpdate) -> dict:
    repo = ServiceRepository.from_db(db)
    old = await _owned_service(repo, service_id, provider, "update")

    updates = body.model_dump(exclude_unset=True)
    # required fields cannot be blanked out
    for key in ("name", "category", "address"):
        if key in updates and not updates[key]:
            updates.pop(key)

    doc = await repo.update(old["_id"], updates) if updates else old
    if not doc:
        raise _not_found()

    if updates:
        await AuditService.from_db(db).log_event(
            "service.update",
            provider_actor(provider),
            {"type": "service", "id": service_id},
            f"Service updated ({doc['name']})",
            {"changes": {k: {"from": old.get(k), "to": v} for k, v in updates.items() if old.get(k) != v}},
        )
    return to_service_out(doc)


async def delete_service(db, provider: dict, service_id: str) -> None:
    repo = ServiceRepository.from_db(db)
    old = await _owned_service(repo, service_id, provider, "delete")
    await repo.delete(old["_id"])

    await AuditService.from_db(db).log_event(
        "service.delete",
        provider_actor(provider),
        {"type": "service", "id": service_id},
        f"Service deleted ({old.get('name')})",
    )


# ------------------------------------------------------------------
# Admin moderation (no ownership gate)
# ------------------------------------------------------------------
async def set_service_status(db, admin: dict, service_id: str, status: ServiceStatus) -> dict:
    repo = ServiceRepository.from_db(db)
    oid = parse_oid(service_id)
    old = await repo.get(oid) if oid else None
    if not old:
        raise _not_found()

    doc = await repo.update(oid, {"status": status.value})
    await AuditService.from_db(db).log_event(
        "service.status",
        admin_actor(admin),
        {"type": "service", "id": service_id},
        f"Service status changed ({old.get('name')})",
        {"from": old.get("status"), "to": status.value},
    )
    return to_service_out(doc)


async def admin_delete_service(db, admin: dict, service_id: str) -> None:
    repo = ServiceRepository.from_db(db)
    oid = parse_oid(service_id)
    old = await repo.get(oid) if oid else None
    if not old:
        raise _not_found()

    await repo.delete(oid)
    await AuditService.from_db(db).log_event(
        "service.delete",
        admin_actor(admin),
        {"type": "service", "id": service_id},
        f"Service deleted by admin ({old.get('name')})",
    )


async def services_for_provider(db, provider_id: str) -> list:
    docs = await ServiceRepository.from_db(db).list_by_provider(provider_id)
    return [to_service_out(d) for d in docs]
