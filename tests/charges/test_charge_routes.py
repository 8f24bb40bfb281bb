import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_charge_service
from application.services.charge_service import ChargeApplicationService
from main import app
from tests.fakes import gid, make_charge


CHARGE_ID = gid("ch", 1)


@pytest.fixture
def client(uow_factory, charge_repo):
    charge_repo.add(make_charge(1, amount=1000))
    service = ChargeApplicationService(uow_factory)
    app.dependency_overrides[get_charge_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_routes_registered():
    routes = set(app.openapi()["paths"])
    routes.update(p for p in (getattr(r, "path", None) for r in app.routes) if p)
    assert "/api/v1/charges/{charge_id}" in routes
    assert "/api/v1/charges/{charge_id}/pay" in routes
    assert "/api/v1/charges/{charge_id}/cancel" in routes
    assert "/api/v1/charges/{charge_id}/transactions" in routes
    assert "/api/v1/charges/webhooks" in routes
    assert "/health" in routes


def test_health():
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "healthy"}
    assert resp.headers.get("X-Request-ID")


def test_get_charge(client):
    resp = client.get(f"/api/v1/charges/{CHARGE_ID}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["code"] == 0
    assert body["data"]["mundipaggId"] == CHARGE_ID
    assert body["data"]["amount"] == 1000


def test_get_missing_charge_is_404(client):
    resp = client.get(f"/api/v1/charges/{gid('ch', 2)}")
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"]["type"] == "ChargeNotFound"
    assert body["error"]["message_key"] == "charge.not_found"


def test_malformed_id_is_422(client):
    resp = client.get("/api/v1/charges/not-an-id")
    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "InvalidParam"


def test_pay_then_pay_again_conflicts(client):
    resp = client.post(f"/api/v1/charges/{CHARGE_ID}/pay", json={"amount": 700})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "paid"
    assert data["paidAmount"] == 700
    assert data["canceledAmount"] == 300

    again = client.post(f"/api/v1/charges/{CHARGE_ID}/pay", json={"amount": 700})
    assert again.status_code == 409
    assert again.json()["message"] == "You can't pay a charge that was paid already!"


def test_pay_negative_amount_is_rejected_by_schema(client):
    resp = client.post(f"/api/v1/charges/{CHARGE_ID}/pay", json={"amount": -1})
    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "ValidationError"


def test_cancel_pending_charge(client):
    resp = client.post(f"/api/v1/charges/{CHARGE_ID}/cancel", json={"amount": 0})
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "canceled"
    assert resp.json()["message"] == "Charge canceled."


def test_refund_message_is_localized(client):
    client.post(f"/api/v1/charges/{CHARGE_ID}/pay", json={"amount": 1000})
    resp = client.post(
        f"/api/v1/charges/{CHARGE_ID}/cancel",
        json={"amount": 300},
        headers={"Accept-Language": "pt-BR,pt;q=0.9"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["refundedAmount"] == 300
    assert resp.headers["Content-Language"] == "pt-BR"
    assert resp.json()["message"] == "Cobrança estornada."


def test_record_transaction(client):
    payload = {"id": gid("tran", 1), "status": "captured", "amount": 1000, "paid_amount": 1000}
    resp = client.post(f"/api/v1/charges/{CHARGE_ID}/transactions", json=payload)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Transaction recorded."


def test_remote_capture_without_gateway_is_503(client):
    resp = client.post(f"/api/v1/charges/{CHARGE_ID}/pay?remote=true", json={"amount": 700})
    assert resp.status_code == 503


def test_webhook_acknowledges_unknown_types(client):
    resp = client.post(
        "/api/v1/charges/webhooks",
        json={"id": "hook_1", "type": "order.created", "data": {"id": CHARGE_ID}},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["handled"] is False


def test_webhook_pays_charge(client):
    resp = client.post(
        "/api/v1/charges/webhooks",
        json={"id": "hook_2", "type": "charge.paid", "data": {"id": CHARGE_ID, "amount": 1000, "paid_amount": 1000}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["handled"] is True
    assert body["data"]["charge"]["status"] == "paid"


def test_webhook_with_unrecognized_transaction_status_reconciles(client):
    resp = client.post(
        "/api/v1/charges/webhooks",
        json={
            "id": "hook_3",
            "type": "charge.paid",
            "data": {
                "id": CHARGE_ID,
                "last_transaction": {"id": "tran_Ab12Cd34Ef56Gh78", "status": "with_error", "amount": 1000},
            },
        },
    )
    assert resp.status_code == 200
    charge = resp.json()["data"]["charge"]
    assert charge["status"] == "paid"
    assert charge["paidAmount"] == 1000
    assert charge["canceledAmount"] == 0
