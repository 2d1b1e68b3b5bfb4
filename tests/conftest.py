from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from registry.config import Settings
from registry.main import create_app
from registry.sessions import SessionCache
from registry.store import JsonFileStore

ADMIN_USER = "admin"
ADMIN_PASS = "canurek3"


class FakeClock:
    """Controllable time source, usable both as a float clock and a datetime clock."""

    def __init__(self, start: datetime = datetime(2026, 2, 7, 10, 30, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> float:
        return self.current.timestamp()

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data.json"


@pytest.fixture
def settings(data_file):
    return Settings(admin_username=ADMIN_USER, admin_password=ADMIN_PASS, data_file=data_file)


@pytest.fixture
def sessions(clock):
    return SessionCache(ADMIN_USER, ADMIN_PASS, clock=clock)


@pytest.fixture
def store(data_file):
    s = JsonFileStore(data_file)
    s.initialize()
    return s


@pytest.fixture
def client(settings, store, sessions):
    app = create_app(settings=settings, store=store, sessions=sessions)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def token(client):
    resp = client.post("/api/admin/login", json={"username": ADMIN_USER, "password": ADMIN_PASS})
    return resp.json()["token"]
