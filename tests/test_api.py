"""
End-to-end tests through the HTTP boundary.

Each test gets a fresh app backed by in-memory SQLite (see conftest.py).
"""

import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from fastapi.testclient import TestClient

from conftest import TEST_SECRET, register_and_login
from ledger.api import create_app
from ledger.audit import AuditLogger
from ledger.orchestrator import AccountFlow, AppComponents, LedgerFlow
from ledger.services.auth import AuthGateway, CredentialStore, PasswordHasher, TokenService
from ledger.services.storage import SqlUserStorage, StorageError, TransactionStorageInterface


COFFEE = {"description": "Coffee", "amount": 25000, "date": "2025-09-18", "type": "expense"}


def add(client, headers, **fields) -> dict:
    payload = {**COFFEE, **fields}
    response = client.post("/api/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestRegistration:
    """Tests for POST /api/register."""

    def test_register(self, client):
        response = client.post(
            "/api/register",
            json={"username": "alice", "email": "alice@example.com", "password": "secret-pass"},
        )
        assert response.status_code == 201
        assert response.json() == {"message": "User registered successfully"}

    def test_duplicate_email(self, client):
        body = {"username": "alice", "email": "alice@example.com", "password": "secret-pass"}
        assert client.post("/api/register", json=body).status_code == 201

        body = {"username": "alice2", "email": "ALICE@example.com", "password": "secret-pass"}
        response = client.post("/api/register", json=body)
        assert response.status_code == 409
        assert response.json() == {"detail": "User already exists"}

    @pytest.mark.parametrize("body", [
        {"username": "alice", "email": "not-an-email", "password": "secret-pass"},
        {"username": "alice", "email": "alice@example.com", "password": "123"},
        {"username": "alice", "email": "alice@example.com"},
        {},
    ])
    def test_invalid_payload(self, client, body):
        response = client.post("/api/register", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid input"

    def test_malformed_json(self, client):
        response = client.post(
            "/api/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400


class TestLogin:
    """Tests for POST /api/login."""

    def test_login_returns_token(self, client):
        headers = register_and_login(client, "alice")
        assert headers["Authorization"].startswith("Bearer ")

    def test_login_email_ignores_case(self, client):
        register_and_login(client, "alice")
        response = client.post(
            "/api/login",
            json={"email": "ALICE@example.com", "password": "secret-pass"},
        )
        assert response.status_code == 200

    def test_wrong_password(self, client):
        register_and_login(client, "alice")
        response = client.post(
            "/api/login",
            json={"email": "alice@example.com", "password": "wrong-pass"},
        )
        assert response.status_code == 401
        assert response.json() == {"detail": "invalid credentials"}

    def test_unknown_email(self, client):
        response = client.post(
            "/api/login",
            json={"email": "nobody@example.com", "password": "secret-pass"},
        )
        assert response.status_code == 401
        assert response.json() == {"detail": "invalid credentials"}


class TestAuthentication:
    """Tests for the bearer token requirement on ledger routes."""

    @pytest.mark.parametrize("method, path", [
        ("get", "/api/transactions"),
        ("post", "/api/transactions"),
        ("delete", f"/api/transactions/{uuid4()}"),
        ("get", "/api/summary"),
        ("get", "/api/monthly-summary?year=2025"),
    ])
    def test_missing_header(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.json() == {"detail": "missing token"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/api/transactions", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json() == {"detail": "invalid token"}

    def test_token_signed_with_other_secret(self, client, alice):
        forged = TokenService("another-secret-key-987654321").issue(uuid4())
        response = client.get("/api/transactions", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401
        assert response.json() == {"detail": "invalid token"}

    def test_expired_token(self, client):
        yesterday = datetime.now(timezone.utc) - timedelta(hours=25)
        stale = TokenService(TEST_SECRET, clock=lambda: yesterday).issue(uuid4())
        response = client.get("/api/transactions", headers={"Authorization": f"Bearer {stale}"})
        assert response.status_code == 401
        assert response.json() == {"detail": "invalid token"}

    def test_auth_checked_before_body(self, client):
        response = client.post("/api/transactions", json={"type": "transfer"})
        assert response.status_code == 401


class TestTransactions:
    """Tests for creating, listing and deleting transactions."""

    def test_new_user_has_empty_list(self, client, alice):
        response = client.get("/api/transactions", headers=alice)
        assert response.status_code == 200
        assert response.json() == []

    def test_create_and_list(self, client, alice):
        created = add(client, alice)
        assert created["description"] == "Coffee"
        assert created["amount"] == 25000
        assert created["date"] == "2025-09-18"
        assert created["type"] == "expense"
        assert "owner_id" not in created

        listed = client.get("/api/transactions", headers=alice).json()
        assert [tx["id"] for tx in listed] == [created["id"]]

    def test_client_supplied_id_is_ignored(self, client, alice):
        chosen = str(uuid4())
        created = add(client, alice, id=chosen)
        assert created["id"] != chosen

    def test_rejects_transfer_type(self, client, alice):
        response = client.post("/api/transactions", json={**COFFEE, "type": "transfer"}, headers=alice)
        assert response.status_code == 400
        assert client.get("/api/transactions", headers=alice).json() == []

    @pytest.mark.parametrize("field, value", [
        ("amount", -1),
        ("amount", "lots"),
        ("date", "18/09/2025"),
        ("date", "2025-02-30"),
        ("description", ""),
    ])
    def test_rejects_bad_fields(self, client, alice, field, value):
        response = client.post("/api/transactions", json={**COFFEE, field: value}, headers=alice)
        assert response.status_code == 400

    def test_newest_first(self, client, alice):
        add(client, alice, date="2025-01-01", description="Old")
        add(client, alice, date="2025-03-01", description="New")
        listed = client.get("/api/transactions", headers=alice).json()
        assert [tx["description"] for tx in listed] == ["New", "Old"]

    @pytest.mark.parametrize("month", ["9", "09"])
    def test_filter_by_month(self, client, alice, month):
        add(client, alice)
        add(client, alice, date="2025-10-01", description="Later")

        response = client.get(f"/api/transactions?year=2025&month={month}", headers=alice)
        assert response.status_code == 200
        assert [tx["description"] for tx in response.json()] == ["Coffee"]

    def test_filter_by_year(self, client, alice):
        add(client, alice)
        add(client, alice, date="2024-09-18", description="Last year")

        for query in ("?year=2025", "?year=2025&month=all"):
            listed = client.get(f"/api/transactions{query}", headers=alice).json()
            assert [tx["description"] for tx in listed] == ["Coffee"]

    def test_month_without_year_is_ignored(self, client, alice):
        add(client, alice)
        add(client, alice, date="2024-01-05", description="Other")
        listed = client.get("/api/transactions?month=9", headers=alice).json()
        assert len(listed) == 2

    @pytest.mark.parametrize("query", ["?year=", "?year=25", "?year=2025&month=13", "?year=2025&month=0"])
    def test_bad_filter(self, client, alice, query):
        response = client.get(f"/api/transactions{query}", headers=alice)
        assert response.status_code == 400

    def test_users_never_see_each_other(self, client, alice, bob):
        add(client, alice, description="Alice's")
        add(client, bob, description="Bob's")

        alice_view = client.get("/api/transactions", headers=alice).json()
        bob_view = client.get("/api/transactions", headers=bob).json()
        assert [tx["description"] for tx in alice_view] == ["Alice's"]
        assert [tx["description"] for tx in bob_view] == ["Bob's"]

    def test_delete(self, client, alice):
        created = add(client, alice)
        response = client.delete(f"/api/transactions/{created['id']}", headers=alice)
        assert response.status_code == 204
        assert client.get("/api/transactions", headers=alice).json() == []

    def test_delete_twice(self, client, alice):
        created = add(client, alice)
        client.delete(f"/api/transactions/{created['id']}", headers=alice)
        response = client.delete(f"/api/transactions/{created['id']}", headers=alice)
        assert response.status_code == 404
        assert response.json() == {"detail": "Transaction not found"}

    def test_cannot_delete_someone_elses(self, client, alice, bob):
        created = add(client, alice)
        response = client.delete(f"/api/transactions/{created['id']}", headers=bob)
        assert response.status_code == 404
        assert len(client.get("/api/transactions", headers=alice).json()) == 1

    def test_delete_bad_id(self, client, alice):
        response = client.delete("/api/transactions/not-a-uuid", headers=alice)
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid transaction id"}


class TestSummaries:
    """Tests for GET /api/summary and GET /api/monthly-summary."""

    def test_empty_summary(self, client, alice):
        response = client.get("/api/summary", headers=alice)
        assert response.status_code == 200
        assert response.json() == {"totalIncome": 0, "totalExpense": 0, "balance": 0}

    def test_coffee_summary(self, client, alice):
        add(client, alice)
        response = client.get("/api/summary?year=2025&month=09", headers=alice)
        assert response.json() == {"totalIncome": 0, "totalExpense": 25000, "balance": -25000}

    def test_balance(self, client, alice):
        add(client, alice, description="Salary", amount=100000, type="income", date="2025-09-01")
        add(client, alice)
        body = client.get("/api/summary", headers=alice).json()
        assert body["balance"] == body["totalIncome"] - body["totalExpense"] == 75000

    def test_summary_respects_filter(self, client, alice):
        add(client, alice)
        add(client, alice, date="2024-09-18", amount=5)
        body = client.get("/api/summary?year=2024", headers=alice).json()
        assert body["totalExpense"] == 5

    def test_summary_is_per_user(self, client, alice, bob):
        add(client, bob, amount=999)
        body = client.get("/api/summary", headers=alice).json()
        assert body["totalExpense"] == 0

    def test_monthly_summary(self, client, alice):
        add(client, alice)
        response = client.get("/api/monthly-summary?year=2025", headers=alice)
        assert response.status_code == 200

        buckets = response.json()
        assert len(buckets) == 12
        assert buckets[0] == {"month": "Jan", "income": 0, "expense": 0}
        assert buckets[8] == {"month": "Sep", "income": 0, "expense": 25000}
        assert buckets[11]["month"] == "Des"

    def test_monthly_summary_with_month(self, client, alice):
        add(client, alice)
        add(client, alice, date="2025-10-01", amount=1)
        buckets = client.get("/api/monthly-summary?year=2025&month=9", headers=alice).json()
        assert len(buckets) == 12
        assert buckets[8]["expense"] == 25000
        assert buckets[9]["expense"] == 0

    def test_monthly_summary_matches_year_summary(self, client, alice):
        add(client, alice, description="Salary", amount=5000, type="income", date="2025-01-31")
        add(client, alice, amount=120, date="2025-06-15")
        add(client, alice, amount=80, date="2025-12-01")

        buckets = client.get("/api/monthly-summary?year=2025", headers=alice).json()
        summary = client.get("/api/summary?year=2025", headers=alice).json()
        assert sum(b["income"] for b in buckets) == summary["totalIncome"]
        assert sum(b["expense"] for b in buckets) == summary["totalExpense"]

    def test_monthly_summary_requires_year(self, client, alice):
        response = client.get("/api/monthly-summary", headers=alice)
        assert response.status_code == 400
        assert response.json() == {"detail": "Parameter 'year' is required"}

    def test_monthly_summary_bad_month(self, client, alice):
        response = client.get("/api/monthly-summary?year=2025&month=13", headers=alice)
        assert response.status_code == 400


class FailingTransactionStorage(TransactionStorageInterface):
    """A backend that is down for every ledger operation."""

    def create_transaction(self, owner_id, data):
        raise StorageError("backend unavailable: create")

    def list_transactions(self, owner_id, period=None):
        raise StorageError("backend unavailable: list")

    def delete_transaction(self, owner_id, transaction_id):
        raise StorageError("backend unavailable: delete")


class TestStoreFailures:
    """A failing backend surfaces as an opaque 500."""

    @pytest.fixture
    def broken_client(self, database):
        audit_logger = AuditLogger()
        tokens = TokenService(TEST_SECRET)
        components = AppComponents(
            database=database,
            gateway=AuthGateway(tokens, audit_logger=audit_logger),
            account_flow=AccountFlow(
                CredentialStore(SqlUserStorage(database), PasswordHasher(rounds=4)),
                tokens,
                audit_logger=audit_logger,
            ),
            ledger_flow=LedgerFlow(FailingTransactionStorage(), audit_logger=audit_logger),
            audit_logger=audit_logger,
        )
        return TestClient(create_app(components))

    @pytest.mark.parametrize("method, path", [
        ("get", "/api/transactions"),
        ("get", "/api/summary"),
        ("get", "/api/monthly-summary?year=2025"),
        ("delete", f"/api/transactions/{uuid4()}"),
    ])
    def test_opaque_500(self, broken_client, method, path):
        headers = register_and_login(broken_client, "alice")
        response = getattr(broken_client, method)(path, headers=headers)
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "backend unavailable" not in response.text

    def test_create_fails_with_500(self, broken_client):
        headers = register_and_login(broken_client, "alice")
        response = broken_client.post("/api/transactions", json=COFFEE, headers=headers)
        assert response.status_code == 500


class TestHealthAndCors:
    """Tests for the health probe and CORS preflight."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_preflight(self, client):
        response = client.options(
            "/api/transactions",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
