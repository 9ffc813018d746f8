async def test_me_includes_counts(client, provider, create_service):
    await create_service(provider)
    await create_service(provider, name="Second")

    r = await client.get("/api/providers/me", headers=provider["headers"])

    me = r.json()["provider"]
    assert me["email"] == "helper@example.org"
    assert me["counts"] == {"services": 2, "events": 0}


async def test_update_profile(client, provider):
    r = await client.put(
        "/api/providers/me",
        json={"organizationName": "Helping Hands Chicago", "phone": "312-555-0199"},
        headers=provider["headers"],
    )

    assert r.status_code == 200
    assert r.json()["message"] == "Profile updated successfully"
    assert r.json()["provider"]["organizationName"] == "Helping Hands Chicago"
    assert r.json()["provider"]["phone"] == "312-555-0199"


async def test_my_services_include_pending(client, provider, other_provider, create_service):
    await create_service(provider, name="Mine")
    await create_service(other_provider, name="Theirs")

    r = await client.get("/api/providers/me/services", headers=provider["headers"])

    services = r.json()["services"]
    assert [s["name"] for s in services] == ["Mine"]
    assert services[0]["status"] == "pending"


async def test_my_events(client, provider, other_provider):
    payload = {"title": "Open House", "startDate": "2030-05-01T10:00:00"}
    await client.post("/api/events", json=payload, headers=provider["headers"])
    await client.post("/api/events", json={**payload, "title": "Not mine"}, headers=other_provider["headers"])

    r = await client.get("/api/providers/me/events", headers=provider["headers"])

    assert [e["title"] for e in r.json()["events"]] == ["Open House"]
