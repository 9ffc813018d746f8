from __future__ import annotations

import logging

from fastapi import HTTPException

from compass.core.enums import TokenType
from compass.core.security import create_access_token, hash_password, verify_password
from compass.mapper.directory_mapper import to_admin_out, to_provider_out
from compass.repositories.provider_repository import AdminRepository, ProviderRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


async def _authenticate(repo, email: str, password: str) -> dict:
    doc = await repo.get_by_email(email)
    if not doc or not verify_password(password, doc.get("password_hash", "")):
        raise HTTPException(401, INVALID_CREDENTIALS)
    return doc


async def login_provider(db, email: str, password: str) -> dict:
    doc = await _authenticate(ProviderRepository.from_db(db), email, password)
    logger.info("Provider %s logged in", doc["_id"])
    return {
        "message": "Login successful",
        "provider": to_provider_out(doc),
        "token": create_access_token(str(doc["_id"]), TokenType.provider),
    }


async def login_admin(db, email: str, password: str) -> dict:
    doc = await _authenticate(AdminRepository.from_db(db), email, password)
    logger.info("Admin %s logged in", doc["_id"])
    return {
        "message": "Login successful",
        "admin": to_admin_out(doc),
        "token": create_access_token(str(doc["_id"]), TokenType.admin),
    }


async def ensure_admin(db, email: str, password: str, first_name: str = "Admin", last_name: str = "User"):
    """Create the admin account if missing. Returns (doc, created)."""
    repo = AdminRepository.from_db(db)
    existing = await repo.get_by_email(email)
    if existing:
        return existing, False

    doc = await repo.create({
        "email": email,
        "password_hash": hash_password(password),
        "first_name": first_name,
        "last_name": last_name,
    })
    return doc, True
