from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from posts import PostRepository
from store import JsonDocumentStore


PASSWORD = "hunter2"
TOKEN = "test-session-token"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def data_path(tmp_path):
    return tmp_path / "data" / "blog.json"


@pytest.fixture
def store(data_path):
    return JsonDocumentStore(data_path)


@pytest.fixture
def repo(store, clock):
    return PostRepository(store, clock=clock)


@pytest.fixture
def app(data_path, clock):
    app = create_app(data_path=data_path, password=PASSWORD, token=TOKEN, clock=clock)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TOKEN}"}
