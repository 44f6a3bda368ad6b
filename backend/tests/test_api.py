"""
HTTP API tests.

The app runs against a temporary SQLite file so each test starts from an
empty ledger.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings

OWNER = {"X-Caller-Id": settings.contract_owner}
ALICE = {"X-Caller-Id": "alice"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    monkeypatch.setattr(settings, "enable_redis_events", False)

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


def register_protocol(client, name="lend"):
    response = client.post(
        "/api/v1/protocols",
        json={"name": name, "address": f"SP.{name}", "supported_tokens": ["STX"], "category": "lending"},
        headers=OWNER,
    )
    assert response.status_code == 201
    return response.json()


class TestHealth:

    def test_health_and_root(self, client):
        health = client.get("/health").json()
        assert health["status"] == "healthy"
        assert health["height"] == 0
        assert client.get("/").json()["docs"] == "/docs"


class TestLedgerFlow:

    def test_register_create_deposit_withdraw(self, client):
        protocol = register_protocol(client)
        assert protocol["id"] == 1

        vault = client.post(
            "/api/v1/vaults",
            json={"name": "Solo", "risk_level": 5, "allocation": [{"protocol_id": 1, "percentage": 100}]},
            headers=ALICE,
        )
        assert vault.status_code == 201
        vault_id = vault.json()["id"]

        preview = client.get(f"/api/v1/vaults/{vault_id}/allocation", params={"amount": 250}).json()
        assert preview["shares"][0]["amount"] == 250

        credited = client.post("/api/v1/accounts/alice/credit", json={"amount": 1000}, headers=OWNER)
        assert credited.json()["balance"] == 1000

        deposit = client.post(f"/api/v1/vaults/{vault_id}/deposit", json={"amount": 1000}, headers=ALICE)
        assert deposit.status_code == 200
        assert deposit.json()["vault"]["total_assets"] == 1000

        withdraw = client.post(f"/api/v1/vaults/{vault_id}/withdraw", json={"amount": 400}, headers=ALICE)
        assert withdraw.json()["position"]["amount"] == 600

        excess = client.post(f"/api/v1/vaults/{vault_id}/withdraw", json={"amount": 1000}, headers=ALICE)
        assert excess.status_code == 409
        assert excess.json()["error"] == "InsufficientFunds"

        assert client.get(f"/api/v1/vaults/{vault_id}").json()["total_assets"] == 600
        assert client.get("/api/v1/accounts/alice").json()["balance"] == 400

        types = [e["event_type"] for e in client.get("/api/v1/events").json()]
        assert "deposit" in types and "withdraw" in types


class TestErrors:

    def test_non_admin_register_forbidden(self, client):
        response = client.post(
            "/api/v1/protocols",
            json={"name": "x", "address": "SP.x"},
            headers=ALICE,
        )
        assert response.status_code == 403
        assert response.json()["error"] == "NotAuthorized"

    def test_missing_caller_header(self, client):
        response = client.post("/api/v1/protocols", json={"name": "x", "address": "SP.x"})
        assert response.status_code == 422

    def test_bad_allocation_and_risk_params(self, client):
        register_protocol(client)
        response = client.post(
            "/api/v1/vaults",
            json={"name": "Bad", "risk_level": 5, "allocation": [{"protocol_id": 1, "percentage": 99}]},
            headers=ALICE,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidParameter"

        response = client.put(
            "/api/v1/protocols/1/risk-params",
            json={"liquidation_threshold": 70, "max_ltv": 80, "liquidation_penalty": 5, "oracle": "fixed"},
            headers=OWNER,
        )
        assert response.status_code == 400

    def test_unknown_vault_and_liquidation_check(self, client):
        response = client.post("/api/v1/vaults/9/deposit", json={"amount": 10}, headers=ALICE)
        assert response.status_code == 404
        assert response.json()["error"] == "VaultNotFound"

        response = client.get("/api/v1/risk/liquidation/1", headers=ALICE)
        assert response.status_code == 404
        assert response.json()["error"] == "ProtocolNotRegistered"


class TestRiskAndBatch:

    def test_preferences_liquidation_and_batch(self, client):
        register_protocol(client)
        client.put(
            "/api/v1/protocols/1/risk-params",
            json={"liquidation_threshold": 80, "max_ltv": 70, "liquidation_penalty": 5, "oracle": "fixed"},
            headers=OWNER,
        )

        prefs = client.put(
            "/api/v1/risk/preferences",
            json={"liquidation_alert_threshold": 2, "rebalance_threshold": 10, "max_slippage": 3},
            headers=ALICE,
        )
        assert prefs.status_code == 200

        check = client.get("/api/v1/risk/liquidation/1", headers=ALICE).json()
        assert check["alert_threshold"] == 78
        assert check["at_risk"] is False

        position = client.put(
            "/api/v1/positions/1",
            json={"supplied": [{"token": "STX", "amount": 100}]},
            headers=ALICE,
        )
        assert position.json()["supplied"][0]["amount"] == 100

        batch = client.post(
            "/api/v1/batch",
            json={"actions": [{"protocol_id": 1, "action": "supply", "amount": 10, "token": "STX"}]},
            headers=ALICE,
        )
        assert batch.status_code == 200
        assert batch.json()["results"][0]["action"] == "supply"

        unsupported = client.post(
            "/api/v1/batch",
            json={"actions": [{"protocol_id": 1, "action": "supply", "amount": 10, "token": "BTC"}]},
            headers=ALICE,
        )
        assert unsupported.status_code == 400
        assert unsupported.json()["error"] == "UnsupportedToken"
