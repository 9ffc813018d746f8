from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import HTTPException

from compass.core.security import hash_password
from compass.mapper.directory_mapper import to_admin_out, to_provider_out
from compass.models.common import parse_oid
from compass.repositories.event_repository import EventRepository
from compass.repositories.provider_repository import AdminRepository, ProviderRepository, email_norm
from compass.repositories.service_repository import NEWEST_FIRST, ServiceRepository
from compass.schemas.provider import ProviderAdminUpdate, ProviderCreate, ProviderProfileUpdate
from compass.services.audit_service import AuditService, admin_actor
from compass.services.query_engine import build_pagination

logger = logging.getLogger(__name__)

PROVIDER_SEARCH_FIELDS = ("email", "organization_name", "first_name", "last_name")


def _not_found() -> HTTPException:
    return HTTPException(404, "Provider not found")


async def _with_counts(db, doc: dict) -> dict:
    pid = str(doc["_id"])
    services = await ServiceRepository.from_db(db).count_by_provider(pid)
    events = await EventRepository.from_db(db).count_by_provider(pid)
    return to_provider_out(doc, services=services, events=events)


async def _get_doc(repo: ProviderRepository, provider_id: str) -> dict:
    oid = parse_oid(provider_id)
    doc = await repo.get(oid) if oid else None
    if not doc:
        raise _not_found()
    return doc


# -------------------------
# Provider self-service
# -------------------------
async def get_me(db, provider: dict) -> dict:
    doc = await _get_doc(ProviderRepository.from_db(db), provider["id"])
    return await _with_counts(db, doc)


async def update_me(db, provider: dict, body: ProviderProfileUpdate) -> dict:
    repo = ProviderRepository.from_db(db)
    doc = await _get_doc(repo, provider["id"])

    updates = body.model_dump(exclude_unset=True)
    if "organization_name" in updates and not updates["organization_name"]:
        updates.pop("organization_name")

    if updates:
        doc = await repo.update(doc["_id"], updates)
    return to_provider_out(doc)


# -------------------------
# Admin
# -------------------------
async def list_providers(
    db,
    search: Optional[str] = None,
    verified: Optional[bool] = None,
    page: int = 1,
    limit: int = 50,
) -> dict:
    repo = ProviderRepository.from_db(db)
    filt: dict = {}

    term = (search or "").strip()
    if term:
        pattern = re.escape(term)
        filt["$or"] = [{f: {"$regex": pattern, "$options": "i"}} for f in PROVIDER_SEARCH_FIELDS]

    if verified is not None:
        filt["verified"] = verified

    total = await repo.count(filt)
    docs = await repo.find(filt, NEWEST_FIRST, skip=(page - 1) * limit, limit=limit)
    return {
        "providers": [await _with_counts(db, d) for d in docs],
        "pagination": build_pagination(total, page, limit),
    }


async def create_provider(db, admin: dict, body: ProviderCreate) -> dict:
    repo = ProviderRepository.from_db(db)
    data = body.model_dump(exclude={"password"})
    data.update({
        "email": str(body.email),
        "password_hash": hash_password(body.password),
        # created by an admin, so verified from the start
        "verified": True,
        "created_by_admin_id": admin["id"],
    })

    doc = await repo.create(data)
    if not doc:
        raise HTTPException(400, "Provider with this email already exists")

    logger.info("Provider %s created by admin %s", doc["_id"], admin["id"])
    await AuditService.from_db(db).log_event(
        "provider.create",
        admin_actor(admin),
        {"type": "provider", "id": str(doc["_id"]), "email": doc["email"]},
        f"Added provider ({doc['email']})",
        {"organization_name": doc["organization_name"]},
    )
    return to_provider_out(doc)


async def get_provider(db, provider_id: str) -> dict:
    doc = await _get_doc(ProviderRepository.from_db(db), provider_id)
    return await _with_counts(db, doc)


async def update_provider(db, admin: dict, provider_id: str, body: ProviderAdminUpdate) -> dict:
    repo = ProviderRepository.from_db(db)
    old = await _get_doc(repo, provider_id)

    patch = body.model_dump(exclude_unset=True)
    updates: dict = {}

    if patch.get("email"):
        new_email = email_norm(str(patch["email"]))
        if new_email != old.get("email"):
            if await repo.get_by_email(new_email):
                raise HTTPException(400, "Email already in use")
            updates["email"] = new_email

    if patch.get("organization_name"):
        updates["organization_name"] = patch["organization_name"]

    for key in ("first_name", "last_name", "phone"):
        if key in patch:
            updates[key] = patch[key]

    if patch.get("verified") is not None:
        updates["verified"] = patch["verified"]

    if patch.get("password"):
        updates["password_hash"] = hash_password(patch["password"])

    doc = await repo.update(old["_id"], updates) if updates else old

    changes = {
        k: {"from": old.get(k), "to": v}
        for k, v in updates.items()
        if k != "password_hash" and old.get(k) != v
    }
    if "password_hash" in updates:
        changes["password"] = "changed"
    if changes:
        await AuditService.from_db(db).log_event(
            "provider.update",
            admin_actor(admin),
            {"type": "provider", "id": provider_id, "email": old.get("email")},
            f"Updated provider ({old.get('email')})",
            {"changes": changes},
        )
    return to_provider_out(doc)


async def delete_provider(db, admin: dict, provider_id: str) -> None:
    repo = ProviderRepository.from_db(db)
    old = await _get_doc(repo, provider_id)
    await repo.delete(old["_id"])

    await AuditService.from_db(db).log_event(
        "provider.delete",
        admin_actor(admin),
        {"type": "provider", "id": provider_id, "email": old.get("email")},
        f"Deleted provider ({old.get('email')})",
    )


async def get_admin_profile(db, admin: dict) -> dict:
    oid = parse_oid(admin["id"])
    doc = await AdminRepository.from_db(db).get(oid) if oid else None
    if not doc:
        raise HTTPException(404, "Admin not found")
    created = await ProviderRepository.from_db(db).count_created_by(admin["id"])
    return to_admin_out(doc, providers_created=created)
