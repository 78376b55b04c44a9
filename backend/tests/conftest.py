import httpx
import pytest
from fastapi.testclient import TestClient

from padops.main import create_app
from padops.shared.config import Settings
from padops.shared.store import JsonStore


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATA_DIR=tmp_path / "data",
        LOG_DIR=None,
        LOCK_MAX_WAIT_SECONDS=0.3,
        LOCK_POLL_INTERVAL_SECONDS=0.02,
        LOCK_STALE_AFTER_SECONDS=30.0,
        LOCK_SWEEP_INTERVAL_SECONDS=60.0,
        BACKUP_KEEP=3,
    )


@pytest.fixture
def store(settings) -> JsonStore:
    return JsonStore(settings.DATA_DIR)


@pytest.fixture
def app(settings):
    return create_app(settings, configure_logging=False)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def aclient(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def seeded(store):
    """One operator with one pad, nothing else."""
    store.write("operators", [{"id": 1, "name": "Acme Energy", "role": "Operator", "status": "Active"}])
    store.write(
        "pads",
        [{"id": 1, "name": "Pad A", "location": "Section 12", "operator_id": 1, "deleted": False}],
    )
    store.write("incident-types", [{"id": 1, "name": "Mechanical"}, {"id": 2, "name": "Weather"}])
    return store
