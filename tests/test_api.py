"""End-to-end HTTP scenarios for the payments service."""

import httpx
import pytest
from fastapi.testclient import TestClient

from paybridge.services.payments.gateway import GatewayAdapter
from paybridge.services.payments.main import app, get_orchestrator
from paybridge.services.payments.service import PaymentOrchestrator
from paybridge.services.payments.simulation import PaymentSimulator


def _orchestrator(gateway):
    return PaymentOrchestrator(
        gateway=gateway,
        simulator=PaymentSimulator("https://vouchers.test/ticket"),
        backoff_base_seconds=0,
    )


@pytest.fixture
def client():
    app.dependency_overrides[get_orchestrator] = lambda: _orchestrator(GatewayAdapter(None))
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_scenario_a_apro_is_approved(client):
    resp = client.post(
        "/api/process-payment",
        json={"transaction_amount": 100, "payer": {"email": "a@b.com"}, "card_data": {"holder_name": "JUAN APRO"}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "approved"
    assert body["simulated"] is True
    assert body["date_approved"]


def test_scenario_b_cont_is_rejected(client):
    resp = client.post(
        "/api/process-payment",
        json={"transaction_amount": 50, "payer": {"email": "a@b.com"}, "card_data": {"holder_name": "JUAN CONT"}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "rejected"
    assert body["simulated"] is True
    assert "date_approved" not in body


def test_scenario_c_missing_email_is_400(client):
    resp = client.post("/api/process-payment", json={"transaction_amount": 100, "payer": {}})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]
    assert "payer.email" in body["required"]
    assert body["missing"] == ["payer.email"]


def test_invalid_json_is_400(client):
    resp = client.post(
        "/api/process-payment",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 400


def test_oversized_amount_is_400(client):
    """An amount too large for a float is a client error, not a crash."""

    resp = client.post(
        "/api/process-payment",
        content=b'{"transaction_amount": 1' + b"0" * 400 + b', "payer": {"email": "a@b.com"}}',
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["missing"] == ["transaction_amount"]


def test_alternative_payment_missing_email_is_400():
    simulator = PaymentSimulator("https://vouchers.test/ticket")

    def voucher_not_expected(_request):
        raise AssertionError("voucher simulated for an invalid body")

    simulator.simulate_voucher = voucher_not_expected
    orchestrator = PaymentOrchestrator(gateway=GatewayAdapter(None), simulator=simulator)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    try:
        with TestClient(app) as client:
            resp = client.post(
                "/api/process-alternative-payment",
                json={"transaction_amount": 300, "payment_method_id": "oxxo", "payer": {}},
            )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 400
    assert resp.json()["missing"] == ["payer.email"]


def test_scenario_d_gateway_failure_falls_back():
    """Configured gateway that cannot be reached still yields a 200 approval."""

    def handler(_):
        raise httpx.ConnectError("network unreachable")

    gateway = GatewayAdapter("TEST-token", base_url="https://gateway.test", transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_orchestrator] = lambda: _orchestrator(gateway)
    try:
        with TestClient(app) as client:
            resp = client.post(
                "/api/process-payment",
                json={"transaction_amount": 100, "token": "card_tok", "payer": {"email": "a@b.com"}},
            )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["simulated"] is True


def test_alternative_payment_is_pending(client):
    resp = client.post(
        "/api/process-alternative-payment",
        json={"transaction_amount": 300, "payment_method_id": "oxxo", "payer": {"email": "a@b.com"}},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "pending"
    assert body["ticket_url"].startswith("https://vouchers.test/ticket/")


def test_health_reports_gateway_configuration(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["gateway_configured"] is False


def test_correlation_id_is_echoed(client):
    resp = client.get("/health", headers={"x-correlation-id": "trace-123"})

    assert resp.headers["x-correlation-id"] == "trace-123"


def test_activate_subscription_stub(client):
    resp = client.post("/api/activate-subscription", json={"email": "a@b.com", "plan": "pro", "payment_id": 12})

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Subscription activated",
        "user": {"email": "a@b.com", "plan": "pro", "status": "active"},
    }


def test_webhook_acknowledges(client):
    resp = client.post("/webhook", json={"type": "payment", "data": {"id": "123"}})

    assert resp.status_code == 200
    assert resp.text == "OK"


def test_metrics_endpoint(client):
    client.get("/health")
    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
