from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from compass.core.config import get_settings

PROVIDERS = "providers"
ADMINS = "admins"
SERVICES = "services"
EVENTS = "events"
AUDIT_LOGS = "audit_logs"


@lru_cache
def get_client() -> AsyncIOMotorClient:
    # motor connects lazily, so building the client never blocks
    return AsyncIOMotorClient(get_settings().mongo_uri)


def get_db() -> AsyncIOMotorDatabase:
    """
    FastAPI dependency that returns the Mongo database instance
    """
    return get_client()[get_settings().mongo_db]


async def ensure_indexes(db) -> None:
    await db[PROVIDERS].create_index("email", unique=True)
    await db[ADMINS].create_index("email", unique=True)
    await db[SERVICES].create_index([("status", 1), ("category", 1), ("subcategory", 1)])
    await db[SERVICES].create_index("provider_id")
    await db[SERVICES].create_index([("latitude", 1), ("longitude", 1)])
    await db[EVENTS].create_index([("status", 1), ("start_date", 1)])
    await db[EVENTS].create_index("provider_id")
    await db[EVENTS].create_index([("latitude", 1), ("longitude", 1)])
