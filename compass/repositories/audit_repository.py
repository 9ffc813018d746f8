from __future__ import annotations

from typing import Any, Dict, List, Optional

from compass.db.mongo import AUDIT_LOGS
from compass.repositories.base import MongoRepository
from compass.utils.mongo import serialize_mongo

LATEST_FIRST = (("time", -1), ("_id", -1))


class AuditRepository(MongoRepository):
    @classmethod
    def from_db(cls, db) -> "AuditRepository":
        return cls(db[AUDIT_LOGS])

    async def list(self, entity_type: Optional[str] = None, limit: int = 200) -> List[Dict[str, Any]]:
        filt = {"entity.type": entity_type} if entity_type else {}
        docs = await self.find(filt, LATEST_FIRST, limit=limit)
        for doc in docs:
            doc["id"] = doc.pop("_id")
        return [serialize_mongo(d) for d in docs]

    async def append(self, entry: Dict[str, Any]) -> None:
        # audit entries are write-once, no created_at/updated_at bookkeeping
        await self.col.insert_one(entry)
