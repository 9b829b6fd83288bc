# tests/conftest.py
import itertools
import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment has to be ready first
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["LOG_FILE"] = ""
os.environ["AUTH_RATE_LIMIT"] = "1000/minute"

import pytest
from fastapi.testclient import TestClient

from daybook.dependencies import get_repositories
from daybook.main import app
from daybook.repositories import Repositories
from daybook.storage import build_stores


class FakeClock:
    """Returns a fixed start time, one minute later on every call."""

    def __init__(self, start=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(minutes=1)
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repos(clock):
    counter = itertools.count(1)
    return Repositories.from_stores(
        build_stores("memory"),
        id_factory=lambda: f"id-{next(counter)}",
        clock=clock,
    )


@pytest.fixture
def client():
    fresh = Repositories.from_stores(build_stores("memory"))
    app.dependency_overrides[get_repositories] = lambda: fresh
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(email="alice@example.com", password="secret123"):
        resp = client.post("/api/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return {"Authorization": f"Bearer {resp.json()['data']['token']}"}
    return _register


@pytest.fixture
def auth_headers(register):
    return register()
