import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from compass.core.enums import TokenType
from compass.core.security import create_access_token, hash_password
from compass.db.mongo import ADMINS, PROVIDERS, SERVICES, get_db
from compass.main import app


@pytest.fixture
def db():
    return AsyncMongoMockClient()["compass_test"]


@pytest.fixture
async def client(db):
    app.dependency_overrides[get_db] = lambda: db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def _insert_provider(db, email: str, organization_name: str) -> dict:
    doc = {
        "email": email,
        "password_hash": hash_password("secret123"),
        "organization_name": organization_name,
        "verified": True,
    }
    r = await db[PROVIDERS].insert_one(doc)
    doc["_id"] = r.inserted_id
    return doc


@pytest.fixture
async def provider(db):
    doc = await _insert_provider(db, "helper@example.org", "Helping Hands")
    token = create_access_token(str(doc["_id"]), TokenType.provider)
    return {"id": str(doc["_id"]), "doc": doc, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
async def other_provider(db):
    doc = await _insert_provider(db, "other@example.org", "Other Org")
    token = create_access_token(str(doc["_id"]), TokenType.provider)
    return {"id": str(doc["_id"]), "doc": doc, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
async def admin(db):
    doc = {
        "email": "admin@example.org",
        "password_hash": hash_password("adminpass"),
        "first_name": "Ada",
        "last_name": "Admin",
    }
    r = await db[ADMINS].insert_one(doc)
    token = create_access_token(str(r.inserted_id), TokenType.admin)
    return {"id": str(r.inserted_id), "headers": {"Authorization": f"Bearer {token}"}}


SERVICE_PAYLOAD = {
    "name": "Food Pantry",
    "description": "Weekly groceries",
    "category": "food",
    "subcategory": "pantry",
    "address": "100 W Randolph St",
    "latitude": 41.8843,
    "longitude": -87.6324,
}


@pytest.fixture
def create_service(client):
    """POST a service as the given provider and return the response."""

    async def _create(who: dict, **overrides):
        return await client.post("/api/services", json={**SERVICE_PAYLOAD, **overrides}, headers=who["headers"])

    return _create


@pytest.fixture
def approve(db):
    """Flip stored services to active without going through the admin API."""

    async def _approve(*service_ids: str):
        for sid in service_ids:
            await db[SERVICES].update_one({"_id": ObjectId(sid)}, {"$set": {"status": "active"}})

    return _approve
