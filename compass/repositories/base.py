from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import ReturnDocument

Sort = Sequence[Tuple[str, int]]


class MongoRepository:
    def __init__(self, col):
        self.col = col

    async def get(self, oid: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.col.find_one({"_id": oid})

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.utcnow()
        data.setdefault("created_at", now)
        data.setdefault("updated_at", now)
        r = await self.col.insert_one(data)
        data["_id"] = r.inserted_id
        return data

    async def update(self, oid: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = {**fields, "updated_at": datetime.utcnow()}
        return await self.col.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, oid: ObjectId) -> bool:
        r = await self.col.delete_one({"_id": oid})
        return r.deleted_count == 1

    async def count(self, filt: Dict[str, Any]) -> int:
        return await self.col.count_documents(filt)

    async def find(
        self,
        filt: Dict[str, Any],
        sort: Sort,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        cursor = self.col.find(filt).sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=limit)
