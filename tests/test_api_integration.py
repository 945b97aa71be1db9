"""
Integration tests for the Fee Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from fee_ledger import api
from fee_ledger.token import TaxedToken
from fee_ledger.storage import InMemoryStorage
from fee_ledger.audit import AuditTrail
from fee_ledger.errors import VariantMismatch


OWNER = "0xowner"
TREASURY = "0xtreasury"


@pytest.fixture
def client():
    """Serve a freshly initialized in-memory token"""
    storage = InMemoryStorage()
    token = TaxedToken(storage, audit_trail=AuditTrail(storage))
    token.initialize(OWNER, "Fee Token", "FEE", TREASURY, 100)
    token.transfer(OWNER, "0xalice", 10_000)

    api.set_token(token)
    yield TestClient(api.app)
    api.set_token(None)


def as_caller(account):
    return {"X-Caller": account}


class TestReadEndpoints:

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_token_info(self, client):
        data = client.get("/token").json()
        assert data["symbol"] == "FEE"
        assert data["owner"] == OWNER
        assert data["fee_rate"] == 100
        assert data["max_fee_rate"] == 200
        assert data["fee_variant"] == "exemption_checked"
        assert data["total_supply"] == str(1_000_000 * 10 ** 18)

    def test_balance_and_tax_estimate(self, client):
        assert client.get("/balances/0xalice").json()["balance"] == "10000"
        assert client.get("/tax", params={"amount": "1000"}).json()["tax"] == "500"
        assert client.get("/exemptions/" + TREASURY).json()["exempt"] is True

    def test_tax_rejects_non_integer(self, client):
        assert client.get("/tax", params={"amount": "-5"}).status_code == 422


class TestValueEndpoints:

    def test_taxed_transfer(self, client):
        r = client.post("/transfer", json={"to": "0xbob", "amount": "1000"}, headers=as_caller("0xalice"))
        assert r.status_code == 200
        assert r.json() == {"success": True, "balance": "9000"}
        assert client.get("/balances/0xbob").json()["balance"] == "500"
        assert client.get("/balances/" + TREASURY).json()["balance"] == "500"

    def test_insufficient_balance(self, client):
        r = client.post("/transfer", json={"to": "0xbob", "amount": "10001"}, headers=as_caller("0xalice"))
        assert r.status_code == 400
        assert r.json()["detail"]["reason"] == "insufficient_balance"

    def test_missing_caller_header(self, client):
        r = client.post("/transfer", json={"to": "0xbob", "amount": "1"})
        assert r.status_code == 422

    def test_approve_and_transfer_from(self, client):
        r = client.post("/approve", json={"spender": "0xbob", "amount": "2000"}, headers=as_caller("0xalice"))
        assert r.json() == {"success": True}

        r = client.post(
            "/transfer-from",
            json={"owner": "0xalice", "to": "0xcarol", "amount": "1500"},
            headers=as_caller("0xbob")
        )
        assert r.status_code == 200
        assert r.json()["allowance"] == "500"
        assert client.get("/allowances/0xalice/0xbob").json()["amount"] == "500"
        assert client.get("/balances/0xcarol").json()["balance"] == "750"


class TestAdminEndpoints:

    def test_non_owner_forbidden(self, client):
        r = client.post("/admin/fee-rate", json={"fee_rate": 0}, headers=as_caller("0xalice"))
        assert r.status_code == 403
        assert r.json()["detail"]["reason"] == "unauthorized"

    def test_pause_blocks_transfers(self, client):
        assert client.post("/admin/pause", headers=as_caller(OWNER)).json() == {"paused": True}

        r = client.post("/transfer", json={"to": "0xbob", "amount": "1"}, headers=as_caller("0xalice"))
        assert r.status_code == 409
        assert r.json()["detail"]["reason"] == "system_paused"

        client.post("/admin/unpause", headers=as_caller(OWNER))
        r = client.post("/transfer", json={"to": "0xbob", "amount": "1"}, headers=as_caller("0xalice"))
        assert r.status_code == 200

    def test_configuration_updates(self, client):
        r = client.post("/admin/fee-rate", json={"fee_rate": 9999}, headers=as_caller(OWNER))
        assert r.json() == {"fee_rate": 9999}

        r = client.post("/admin/exemptions", json={"account": "0xalice", "exempt": True}, headers=as_caller(OWNER))
        assert r.json() == {"account": "0xalice", "exempt": True}

        r = client.post("/admin/treasury", json={"treasury": "0xvault"}, headers=as_caller(OWNER))
        assert r.json() == {"treasury": "0xvault"}
        assert client.get("/exemptions/" + TREASURY).json()["exempt"] is False

    def test_fee_exceeding_amount(self, client):
        client.post("/admin/fee-rate", json={"fee_rate": 9999}, headers=as_caller(OWNER))
        r = client.post("/transfer", json={"to": "0xbob", "amount": "100"}, headers=as_caller("0xalice"))
        assert r.status_code == 400
        assert r.json()["detail"]["reason"] == "fee_exceeds_amount"
        assert client.get("/balances/0xalice").json()["balance"] == "10000"

    def test_audit_chain_valid(self, client):
        client.post("/transfer", json={"to": "0xbob", "amount": "10"}, headers=as_caller("0xalice"))
        r = client.get("/audit/verify")
        assert r.status_code == 200
        assert r.json()["valid"] is True


class TestErrorMapping:

    def test_variant_mismatch_is_conflict(self):
        error = api.to_http_error(VariantMismatch("Stored fee policy uses unconditional"))
        assert error.status_code == 409
        assert error.detail["reason"] == "variant_mismatch"
