from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

# Default to the memory backend so importing the module-level app never touches disk
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from task_tracker.client import ClientSyncState, MemorySessionStore, TrackerApi  # noqa: E402
from task_tracker.main import create_app  # noqa: E402
from task_tracker.settings import Settings  # noqa: E402

PASSWORD = "s3cret-pass"


@pytest.fixture()
def settings() -> Settings:
    return Settings(jwt_secret="test-secret")


@pytest.fixture()
def app(settings: Settings):
    """A fresh app with empty in-memory stores for every test."""
    return create_app(settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def register(client: TestClient) -> Callable[..., Tuple[dict, Dict[str, str]]]:
    """
    Register a user and return (identity record, auth headers).
    """

    def _register(email: str, name: str = "", password: str = PASSWORD) -> Tuple[dict, Dict[str, str]]:
        res = client.post("/api/users/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        body = res.json()
        return body, {"Authorization": f"Bearer {body['token']}"}

    return _register


class RecordingApi(TrackerApi):
    """TrackerApi that remembers every request it sends."""

    def __init__(self, http) -> None:
        super().__init__(http)
        self.calls: List[Tuple[str, str]] = []

    def _request(self, method: str, path: str, session=None, json: Optional[dict] = None):
        self.calls.append((method, path))
        return super()._request(method, path, session, json)


@pytest.fixture()
def api(client: TestClient) -> RecordingApi:
    return RecordingApi(client)


@pytest.fixture()
def state(api: RecordingApi) -> ClientSyncState:
    """Client state registered as ada@example.com with an empty task list."""
    st = ClientSyncState(api, MemorySessionStore())
    st.register("Ada", "ada@example.com", PASSWORD)
    return st
