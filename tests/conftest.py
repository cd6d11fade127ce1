import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PRESENCE_BACKEND"] = "memory"
os.environ["RELAY_REQUIRE_AUTH"] = "true"
os.environ["SUPERUSER_EMAIL"] = "admin"
os.environ["SUPERUSER_PASSWORD"] = "admin-pass"

import pytest
from fastapi.testclient import TestClient

from shotboard.api.dependencies import authenticate_token, authorize_join, get_relay
from shotboard.core.config import settings
from shotboard.db import Base, engine
from shotboard.main import app
from shotboard.realtime import Relay, RoomRegistry


class FakeConnection:
    """Collects relay frames instead of writing them to a socket."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def events(self):
        return [message["event"] for message in self.sent]

    def last(self, event):
        matches = [m["data"] for m in self.sent if m["event"] == event]
        return matches[-1] if matches else None


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def relay():
    relay = Relay(
        RoomRegistry(),
        require_auth=True,
        authenticate=authenticate_token,
        authorize_join=authorize_join,
    )
    app.dependency_overrides[get_relay] = lambda: relay
    yield relay
    app.dependency_overrides.pop(get_relay, None)


@pytest.fixture
def client(relay):
    with TestClient(app) as client:
        yield client


def register(client, email, password="secret-pass"):
    """Register a user, leaving the client logged in as them; returns the token."""
    response = client.post("/api/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.cookies[settings.SESSION_COOKIE_NAME]


def use_session(client, token):
    client.cookies.clear()
    client.cookies.set(settings.SESSION_COOKIE_NAME, token)


@pytest.fixture
def ana(client):
    return register(client, "ana@example.com")
