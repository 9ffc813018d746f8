from __future__ import annotations

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from compass.db.mongo import SERVICES
from compass.repositories.base import MongoRepository

# newest first; equal timestamps keep insertion order
NEWEST_FIRST = (("created_at", -1), ("_id", 1))


class ServiceRepository(MongoRepository):
    @classmethod
    def from_db(cls, db) -> "ServiceRepository":
        return cls(db[SERVICES])

    async def get_and_count_view(self, oid: ObjectId) -> Optional[Dict[str, Any]]:
        # single atomic update: one detail fetch == one view
        return await self.col.find_one_and_update(
            {"_id": oid},
            {"$inc": {"view_count": 1}},
            return_document=ReturnDocument.AFTER,
        )

    async def list_by_provider(self, provider_id: str) -> List[Dict[str, Any]]:
        return await self.find({"provider_id": provider_id}, NEWEST_FIRST)

    async def ids_matching(self, filt: Dict[str, Any]) -> List[str]:
        cursor = self.col.find(filt, {"_id": 1})
        return [str(d["_id"]) async for d in cursor]

    async def summaries(self, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        oids = [ObjectId(x) for x in ids if ObjectId.is_valid(x)]
        if not oids:
            return {}
        out = {}
        async for d in self.col.find({"_id": {"$in": oids}}):
            out[str(d["_id"])] = d
        return out

    async def count_by_provider(self, provider_id: str) -> int:
        return await self.count({"provider_id": provider_id})
