import httpx
import respx

from compass.core.config import get_settings
from compass.opendata.adapters import CHICAGO_ADAPTERS

ORIGIN = {"latitude": 41.8781, "longitude": -87.6298}


def feed(dataset: str) -> str:
    return f"{get_settings().open_data_base_url}/{dataset}.json"


def grocery(name, miles_north, **extra):
    return {
        "store_name": name,
        "address": "1 State St",
        "location": {"type": "Point", "coordinates": [-87.6298, 41.8781 + miles_north / 69.09]},
        **extra,
    }


async def test_categories(client):
    r = await client.get("/api/open-data/categories")

    assert r.status_code == 200
    assert r.json()["categories"]["healthcare"] == ["clinics", "vaccines"]


@respx.mock
async def test_radius_search_over_a_feed(client):
    respx.get(feed("3e26-zek2")).mock(
        return_value=httpx.Response(200, json=[grocery("Near Mart", 2), grocery("Far Mart", 8), {"store_name": "x"}])
    )

    r = await client.get("/api/open-data/services", params={"category": "food", **ORIGIN, "radius": 5})

    assert r.status_code == 200
    body = r.json()
    assert [s["name"] for s in body["services"]] == ["Near Mart"]
    assert body["services"][0]["id"].startswith("groceryStores:")
    assert 1.9 < body["services"][0]["distance"] < 2.1
    assert body["pagination"] == {"page": 1, "limit": 50, "total": 1, "totalPages": 1}
    assert body["errors"] is None
    assert body["rejected"] == [{"source": "groceryStores", "reason": "missing required fields: address, location"}]


@respx.mock
async def test_failed_feed_is_reported_alongside_results(client):
    respx.get(feed("mw69-m6xi")).mock(return_value=httpx.Response(500))
    respx.get(feed("kcki-hnch")).mock(
        return_value=httpx.Response(
            200,
            json=[{"clinic_name": "Lakeview", "address": "2 Clark St",
                   "location": {"latitude": "41.94", "longitude": "-87.65"}}],
        )
    )
    respx.get(feed("j8c5-wxd5")).mock(side_effect=httpx.ConnectTimeout("slow"))

    r = await client.get("/api/open-data/services", params={"category": "healthcare", "search": "lake"})

    body = r.json()
    assert [s["name"] for s in body["services"]] == ["Lakeview"]
    assert body["services"][0]["distance"] is None
    assert len(body["errors"]) == 2


async def test_unknown_category(client):
    r = await client.get("/api/open-data/services", params={"category": "transport"})

    assert r.status_code == 200
    assert r.json()["services"] == []
    assert r.json()["errors"] == ["No data available for transport services"]


async def test_category_is_required(client):
    r = await client.get("/api/open-data/services")
    assert r.status_code == 400


async def test_health(client):
    r = await client.get("/api/health")
    assert r.json() == {"status": "ok", "message": "Chicago Community Compass API"}


async def test_unknown_route_uses_error_envelope(client):
    r = await client.get("/api/nowhere")
    assert r.status_code == 404
    assert r.json() == {"error": {"message": "Not Found"}}


@respx.mock
async def test_all_subcategory_covers_the_whole_category(client):
    respx.get(feed("3e26-zek2")).mock(return_value=httpx.Response(200, json=[grocery("Mart", 1)]))

    r = await client.get("/api/open-data/services", params={"category": "food", "subcategory": "all"})

    body = r.json()
    assert [s["name"] for s in body["services"]] == ["Mart"]
    assert body["errors"] is None


@respx.mock
async def test_all_category_fetches_every_feed(client):
    routes = {
        a.key: respx.get(feed(a.dataset)).mock(return_value=httpx.Response(200, json=[]))
        for a in CHICAGO_ADAPTERS
    }
    routes["groceryStores"].mock(return_value=httpx.Response(200, json=[grocery("Mart", 1)]))

    r = await client.get("/api/open-data/services", params={"category": "all"})

    body = r.json()
    assert all(route.called for route in routes.values())
    assert [s["name"] for s in body["services"]] == ["Mart"]
    assert body["errors"] is None
