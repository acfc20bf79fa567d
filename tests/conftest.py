"""
Shared fixtures.

Every test gets its own in-memory SQLite database; no test touches
a real backend or the network.
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from ledger.api import create_app
from ledger.config import DatabaseSettings, Settings
from ledger.orchestrator import create_app_components
from ledger.services.auth import PasswordHasher
from ledger.services.storage import Database, SqlTransactionStorage, SqlUserStorage


TEST_SECRET = "test-secret-key-0123456789"


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    monkeypatch.setenv("AUTH_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("AUTH_BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")


@pytest.fixture
def database():
    db = Database(DatabaseSettings(url="sqlite://"))
    yield db
    db.dispose()


@pytest.fixture
def user_storage(database):
    return SqlUserStorage(database)


@pytest.fixture
def transaction_storage(database):
    return SqlTransactionStorage(database)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def owner_id():
    return uuid4()


@pytest.fixture
def client(database):
    components = create_app_components(Settings(), database=database)
    return TestClient(create_app(components))


def register_and_login(client, username: str, password: str = "secret-pass") -> dict:
    """Register a user and return ready-to-use Authorization headers."""
    email = f"{username}@example.com"
    response = client.post(
        "/api/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text

    response = client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def alice(client):
    return register_and_login(client, "alice")


@pytest.fixture
def bob(client):
    return register_and_login(client, "bob")
