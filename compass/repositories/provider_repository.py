from __future__ import annotations

from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from compass.db.mongo import ADMINS, PROVIDERS
from compass.repositories.base import MongoRepository


def email_norm(email: str) -> str:
    return (email or "").lower().strip()


class AccountRepository(MongoRepository):
    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"email": email_norm(email)})

    async def create(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data["email"] = email_norm(data["email"])
        # duplicate check works even without the unique index
        if await self.get_by_email(data["email"]):
            return None
        try:
            return await super().create(data)
        except DuplicateKeyError:
            return None


class ProviderRepository(AccountRepository):
    @classmethod
    def from_db(cls, db) -> "ProviderRepository":
        return cls(db[PROVIDERS])

    async def count_created_by(self, admin_id: str) -> int:
        return await self.count({"created_by_admin_id": admin_id})


class AdminRepository(AccountRepository):
    @classmethod
    def from_db(cls, db) -> "AdminRepository":
        return cls(db[ADMINS])
