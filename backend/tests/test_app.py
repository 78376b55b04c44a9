"""App wiring: lock router, conflict responses through real routes, errors."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from asgi_helpers import DroppingClient, http_scope
from padops.locks.guard import CLIENT_GONE_STATUS, CONFLICT_DETAIL
from padops.shared.config import Settings
from padops.shared.logging import build_logging_config


def test_healthz(client) -> None:
    assert client.get("/api/healthz").json() == {"status": "ok", "app": "padops"}


def test_corrupt_table_is_a_500(app, settings) -> None:
    settings.DATA_DIR.mkdir(parents=True)
    (settings.DATA_DIR / "pads.json").write_text("{not json", encoding="utf-8")

    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/pads")

    assert r.status_code == 500
    assert r.json() == {"detail": "Something broke!"}


@pytest.mark.asyncio
async def test_locked_job_gets_conflict(app, aclient, seeded) -> None:
    locks = app.state.lock_manager
    await locks.acquire("job", "1")

    r = await aclient.put("/api/jobs/1", json={"status": "active"})

    assert r.status_code == 409
    assert r.json() == {"detail": CONFLICT_DETAIL}
    # reads still go through
    assert (await aclient.get("/api/jobs")).status_code == 200


@pytest.mark.asyncio
async def test_write_proceeds_after_holder_releases(app, aclient, seeded) -> None:
    locks = app.state.lock_manager
    await locks.acquire("pad", "1")
    asyncio.get_running_loop().call_later(0.1, locks.release, "pad", "1")

    r = await aclient.put("/api/pads/1", json={"name": "Pad Z", "location": "S1", "operator_id": 1})

    assert r.status_code == 200
    assert not locks.is_locked("pad", "1")


@pytest.mark.asyncio
async def test_lock_router(app, aclient) -> None:
    locks = app.state.lock_manager
    assert (await aclient.get("/api/locks")).json() == []

    await locks.acquire("incident", "5")
    listed = (await aclient.get("/api/locks")).json()
    assert [(l["resource_type"], l["resource_id"]) for l in listed] == [("incident", "5")]
    assert listed[0]["age_seconds"] >= 0

    status = (await aclient.get("/api/locks/incident/5")).json()
    assert status == {"resource_type": "incident", "resource_id": "5", "locked": True}

    assert (await aclient.post("/api/locks/sweep")).json() == {"reclaimed": []}

    released = await aclient.post("/api/locks/incident/5/release")
    assert released.json() == {"released": True}
    again = await aclient.post("/api/locks/incident/5/release")
    assert again.json() == {"released": False}


def test_logging_config_console_only(settings) -> None:
    cfg = build_logging_config(settings)
    assert list(cfg["handlers"]) == ["console"]


def test_logging_config_with_files(tmp_path) -> None:
    cfg = build_logging_config(Settings(LOG_DIR=tmp_path / "logs", LOG_LEVEL="debug"))
    assert set(cfg["handlers"]) == {"console", "combined", "error"}
    assert cfg["handlers"]["error"]["level"] == "ERROR"
    assert cfg["loggers"]["padops"]["level"] == "DEBUG"
    assert (tmp_path / "logs").is_dir()


def test_logging_config_bad_level() -> None:
    with pytest.raises(ValueError):
        build_logging_config(Settings(LOG_LEVEL="loud"))


def test_settings_cors_list() -> None:
    s = Settings(CORS_ORIGINS="http://a, http://b ,")
    assert s.cors_origins_list == ["http://a", "http://b"]


@pytest.mark.asyncio
async def test_client_leaving_during_wait_never_writes(app, seeded) -> None:
    locks = app.state.lock_manager
    holder = await locks.acquire("operator", "1")
    asyncio.get_running_loop().call_later(0.2, locks.release, "operator", "1", holder)
    peer = DroppingClient(body=json.dumps({"name": "Renamed"}).encode(), drop_after=0.1)

    await app(http_scope("PUT", "/api/operators/1"), peer.receive, peer.send)

    assert peer.status == CLIENT_GONE_STATUS
    await asyncio.sleep(0.25)
    assert locks.entries() == []
    assert seeded.read("operators")[0]["name"] == "Acme Energy"
