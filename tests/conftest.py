import os
from contextlib import contextmanager

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["METRICS_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from decaping.core import clock  # noqa: E402
from decaping.core.config import Settings  # noqa: E402
from decaping.database.engine import Database  # noqa: E402
from decaping.store.entity_store import EntityStore  # noqa: E402
from main import create_app  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


class FakeClock:
    """Stands in for ``clock.now``; falls back to the real clock when unset."""

    def __init__(self, real):
        self.real = real
        self.current = None

    def __call__(self):
        return self.current or self.real()


@pytest.fixture
def fake_clock(monkeypatch):
    fc = FakeClock(clock.now)
    monkeypatch.setattr(clock, "now", fc)
    return fc


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    with database.session() as session:
        yield EntityStore(session)


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SEED_DEMO_DATA=False,
        METRICS_ENABLED=False,
        BOOTSTRAP_ADMIN_USERNAME=ADMIN_USERNAME,
        BOOTSTRAP_ADMIN_PASSWORD=ADMIN_PASSWORD,
    )


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def login(client, username, password):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def supervisor_headers(client, admin_headers):
    resp = client.post(
        "/api/users",
        json={"username": "sup1", "password": "secret1", "name": "Sup One", "role": "supervisor"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return login(client, "sup1", "secret1")


def operation_payload(**overrides):
    payload = {
        "date": "2025-06-01T08:00:00Z",
        "decapingMethod": "transport",
        "machineId": 1,
        "shift": 1,
        "panel": "P1",
        "section": "T2",
        "level": "N3",
        "machineState": "running",
        "runningHours": 6.5,
        "stopHours": 1.5,
        "excavatedVolume": 300.0,
        "truckCount": 4,
    }
    payload.update(overrides)
    return payload


def machine_payload(**overrides):
    payload = {
        "name": "Bulldozer D11-2",
        "type": "d11",
        "decapingMethod": "poussage",
        "specifications": {"power": "850 HP"},
        "currentState": "running",
    }
    payload.update(overrides)
    return payload


@contextmanager
def app_store(app):
    """Look at the app's database directly, outside any request."""
    with app.state.database.session() as db:
        yield EntityStore(db)
