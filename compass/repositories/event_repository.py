from __future__ import annotations

from typing import Any, Dict, List

from compass.db.mongo import EVENTS
from compass.repositories.base import MongoRepository

SOONEST_FIRST = (("start_date", 1), ("_id", 1))


class EventRepository(MongoRepository):
    @classmethod
    def from_db(cls, db) -> "EventRepository":
        return cls(db[EVENTS])

    async def list_by_provider(self, provider_id: str) -> List[Dict[str, Any]]:
        return await self.find({"provider_id": provider_id}, SOONEST_FIRST)

    async def upcoming_for_service(self, service_id: str, limit: int = 5) -> List[Dict[str, Any]]:
        return await self.find(
            {"service_id": service_id, "status": {"$in": ["upcoming", "ongoing"]}},
            SOONEST_FIRST,
            limit=limit,
        )

    async def count_by_provider(self, provider_id: str) -> int:
        return await self.count({"provider_id": provider_id})
