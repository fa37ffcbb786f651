"""Test configuration and fixtures for the Snapgram package.

This module provides common fixtures used across all test modules:
- An in-memory MongoDB client injected into the Database
- A service container wired to that database and a temporary upload root
- A TestClient talking https so secure refresh cookies round-trip
- Helpers to register and log in users
"""

import os
from dataclasses import dataclass

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

TEST_SECRETS = {
    "access_token_secret": "test-access-secret",
    "refresh_token_secret": "test-refresh-secret",
}

# Settings are read at import time; placeholder secrets are refused outside debug.
for _name, _value in TEST_SECRETS.items():
    os.environ.setdefault(_name.upper(), _value)

from snapgram.core import dependencies
from snapgram.core.database import Database
from snapgram.core.security import TokenService
from snapgram.core.settings import SecuritySettings, settings
from snapgram.main import app


@dataclass
class LoggedInUser:
    id: str
    username: str
    password: str
    access_token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(SecuritySettings(**TEST_SECRETS))


@pytest.fixture
def database() -> Database:
    return Database(name="snapgram-test", client=AsyncMongoMockClient())


@pytest_asyncio.fixture
async def open_database(database: Database):
    await database.open()
    yield database
    await database.close()


@pytest.fixture
def container(database, tmp_path, monkeypatch):
    """Fresh service container bound to the in-memory database."""
    monkeypatch.setattr(settings.api, "log_dir", str(tmp_path / "logs"))
    dependencies.get_service_container.cache_clear()
    container = dependencies.get_service_container()
    container.initialize(database=database, upload_root=tmp_path / "uploads")
    yield container
    dependencies.get_service_container.cache_clear()


@pytest.fixture
def client(container):
    with TestClient(app, base_url="https://testserver") as client:
        yield client


@pytest.fixture
def register(client: TestClient):
    def _register(username: str, password: str = "secret") -> None:
        response = client.post(
            "/users", json={"username": username, "password": password}
        )
        assert response.status_code == 201, response.text

    return _register


@pytest.fixture
def login(client: TestClient):
    """Log in (setting the refresh cookie on the client) and look up the id."""

    def _login(username: str, password: str = "secret") -> LoggedInUser:
        response = client.post(
            "/auth", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        token = response.json()["accessToken"]

        found = client.get(
            f"/users/^{username}$", headers={"Authorization": f"Bearer {token}"}
        )
        user_id = found.json()[0]["_id"]
        return LoggedInUser(user_id, username, password, token)

    return _login


@pytest.fixture
def alice(register, login) -> LoggedInUser:
    register("alice")
    return login("alice")


@pytest.fixture
def bob(register, login) -> LoggedInUser:
    """A second user. Logging in replaces the client's refresh cookie."""
    register("bob")
    return login("bob")
