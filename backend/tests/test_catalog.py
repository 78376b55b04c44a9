"""Incident type and fault category routes."""

import pytest

from padops.locks.guard import CONFLICT_DETAIL


class TestIncidentTypes:
    def test_list(self, client, seeded) -> None:
        assert [t["name"] for t in client.get("/api/incident-types").json()] == ["Mechanical", "Weather"]

    def test_get_unknown(self, client, seeded) -> None:
        r = client.get("/api/incident-types/99")
        assert r.status_code == 404
        assert r.json() == {"detail": "Incident type not found"}

    def test_create(self, client, seeded, settings) -> None:
        r = client.post("/api/incident-types", json={"name": " Electrical ", "fault_category": "Equipment"})
        assert r.status_code == 201
        body = r.json()
        assert body["id"] == 3
        assert body["name"] == "Electrical"
        assert body["description"] == ""
        assert body["fault_category"] == "Equipment"
        assert body["created_at"]
        # existing table is backed up before the write
        assert any(p.name.startswith("incident-types_") for p in settings.backup_dir.iterdir())

    def test_create_requires_name(self, client, seeded) -> None:
        assert client.post("/api/incident-types", json={"description": "x"}).status_code == 422

    def test_blank_name_rejected(self, client, seeded) -> None:
        r = client.post("/api/incident-types", json={"name": "   "})
        assert r.status_code == 400
        assert r.json()["detail"] == "Invalid incident type data"

    def test_duplicate_name(self, client, seeded) -> None:
        r = client.post("/api/incident-types", json={"name": "Weather"})
        assert r.status_code == 400
        assert r.json()["detail"] == "An incident type with this name already exists"

    def test_update(self, client, seeded) -> None:
        r = client.put("/api/incident-types/2", json={"description": "Storms, heat"})
        assert r.status_code == 200
        assert r.json()["name"] == "Weather"
        assert r.json()["description"] == "Storms, heat"
        assert r.json()["updated_at"]
        assert seeded.read("incident-types")[1]["description"] == "Storms, heat"

    def test_update_to_taken_name(self, client, seeded) -> None:
        assert client.put("/api/incident-types/2", json={"name": "Mechanical"}).status_code == 400
        # keeping its own name is fine
        assert client.put("/api/incident-types/2", json={"name": "Weather"}).status_code == 200

    def test_update_unknown(self, client, seeded) -> None:
        assert client.put("/api/incident-types/99", json={"name": "X"}).status_code == 404

    def test_delete(self, client, seeded) -> None:
        assert client.delete("/api/incident-types/1").status_code == 204
        assert [t["id"] for t in seeded.read("incident-types")] == [2]
        assert client.delete("/api/incident-types/1").status_code == 404


class TestFaultCategories:
    def test_empty_list(self, client) -> None:
        assert client.get("/api/fault-categories").json() == []

    def test_crud(self, client, store) -> None:
        r = client.post("/api/fault-categories", json={"name": "Equipment", "description": "Rig and pumps"})
        assert r.status_code == 201
        category = r.json()
        assert category["id"] == 1
        assert category["created_at"]

        r = client.put("/api/fault-categories/1", json={"description": "Surface equipment"})
        assert r.status_code == 200
        assert r.json()["name"] == "Equipment"
        assert r.json()["description"] == "Surface equipment"
        assert r.json()["id"] == 1

        assert client.get("/api/fault-categories/1").json()["description"] == "Surface equipment"
        assert store.read("fault_categories")[0]["updated_at"]

        assert client.delete("/api/fault-categories/1").status_code == 204
        assert store.read("fault_categories") == []

    def test_unknown_category(self, client) -> None:
        assert client.get("/api/fault-categories/5").status_code == 404
        assert client.put("/api/fault-categories/5", json={"name": "X"}).status_code == 404
        r = client.delete("/api/fault-categories/5")
        assert r.status_code == 404
        assert r.json() == {"detail": "Fault category not found"}

    def test_missing_name_rejected(self, client) -> None:
        assert client.post("/api/fault-categories", json={}).status_code == 422


@pytest.mark.asyncio
async def test_locked_incident_type_gets_conflict(app, aclient, seeded) -> None:
    locks = app.state.lock_manager
    await locks.acquire("incident-type", "2")

    r = await aclient.put("/api/incident-types/2", json={"name": "Storm"})

    assert r.status_code == 409
    assert r.json() == {"detail": CONFLICT_DETAIL}
    assert seeded.read("incident-types")[1]["name"] == "Weather"
    # other ids are unaffected
    assert (await aclient.delete("/api/incident-types/1")).status_code == 204


@pytest.mark.asyncio
async def test_locked_fault_category_gets_conflict(app, aclient, store) -> None:
    store.write("fault_categories", [{"id": 4, "name": "Environmental"}])
    locks = app.state.lock_manager
    await locks.acquire("fault-category", "4")

    r = await aclient.delete("/api/fault-categories/4")

    assert r.status_code == 409
    assert store.read("fault_categories") == [{"id": 4, "name": "Environmental"}]
    locks.release("fault-category", "4")
    assert (await aclient.delete("/api/fault-categories/4")).status_code == 204
