from datetime import datetime

from compass.repositories.audit_repository import AuditRepository
from compass.utils.mongo import serialize_mongo


class AuditService:
    def __init__(self, repo: AuditRepository):
        self.repo = repo

    @classmethod
    def from_db(cls, db) -> "AuditService":
        return cls(AuditRepository.from_db(db))

    async def list_logs(self, entity_type: str | None = None):
        return await self.repo.list(entity_type)

    async def log_event(self, type_: str, actor: dict, entity: dict, message: str, meta: dict | None = None):
        await self.repo.append({
            "time": datetime.utcnow(),
            "type": type_,
            "actor": actor,
            "entity": entity,
            "message": message,
            "meta": serialize_mongo(meta or {}),
        })


def provider_actor(provider: dict) -> dict:
    return {"role": "provider", "id": provider["id"], "email": provider.get("email")}


def admin_actor(admin: dict) -> dict:
    return {"role": "admin", "id": admin["id"], "email": admin.get("email")}
