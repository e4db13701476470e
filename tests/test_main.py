"""HTTP entry points: status codes, payload shapes and cache headers."""

import pytest
from fastapi.testclient import TestClient

from pixpay.common.config import GatewayConfig
from pixpay.services.payments.main import app, get_payment_service, get_reconciler
from pixpay.services.payments.reconciler import StatusReconciler
from pixpay.services.payments.service import PixPaymentService


@pytest.fixture
def client(gateway_config, store, fake_gateway):
    app.dependency_overrides[get_payment_service] = lambda: PixPaymentService(
        gateway_config, store, gateway=fake_gateway
    )
    app.dependency_overrides[get_reconciler] = lambda: StatusReconciler(gateway_config, store, gateway=fake_gateway)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_create_payment_returns_camel_case_result(client, checkout_payload, fake_gateway):
    resp = client.post("/create-customer-payment", json=checkout_payload)

    assert resp.status_code == 200
    body = resp.json()
    assert body["paymentId"] == "pay_000001"
    assert body["copyPasteKey"] == body["qrPayload"] == fake_gateway.qr_payload
    assert body["qrImage"].startswith("data:image/png;base64,")
    assert body["value"] == 1234.56
    assert body["persistedRecord"]["chargeId"] == "pay_000001"
    assert body["persistedRecord"]["amount"] == 1234.56
    assert body["customer"]["id"] == "cus_000001"
    assert body["qrCode"]["encodedImage"] == fake_gateway.encoded_image
    assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"


def test_empty_body_is_rejected(client, fake_gateway):
    resp = client.post("/create-customer-payment", content=b"")

    assert resp.status_code == 400
    assert resp.json()["error"] == "request body not provided"
    assert fake_gateway.calls == []


def test_invalid_json_is_rejected(client):
    resp = client.post(
        "/create-customer-payment",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400


def test_missing_fields_are_listed(client, checkout_payload):
    del checkout_payload["email"]
    del checkout_payload["value"]

    resp = client.post("/create-customer-payment", json=checkout_payload)

    assert resp.status_code == 400
    assert resp.json()["details"] == {"missing_fields": ["email", "value"]}


def test_wrong_method_is_405(client):
    assert client.get("/create-customer-payment").status_code == 405
    resp = client.post("/check-payment-status", params={"paymentId": "pay_1"})
    assert resp.status_code == 405
    assert resp.json()["error"] == "Method Not Allowed"


def test_gateway_failure_maps_to_500_with_upstream_details(client, checkout_payload, fake_gateway):
    fake_gateway.fail_on = {"create_charge"}

    resp = client.post("/create-customer-payment", json=checkout_payload)

    assert resp.status_code == 500
    body = resp.json()
    assert body["upstreamStatus"] == 400
    assert body["details"]["errors"][0]["code"] == "invalid_action"


def test_unusable_qr_code_maps_to_500(client, checkout_payload, fake_gateway):
    fake_gateway.qr_payload = "short"

    resp = client.post("/create-customer-payment", json=checkout_payload)

    assert resp.status_code == 500
    assert "unusable" in resp.json()["error"]


def test_check_status_round_trip(client, checkout_payload, fake_gateway):
    client.post("/create-customer-payment", json=checkout_payload)
    fake_gateway.remote_status["pay_000001"] = "CONFIRMED"

    resp = client.get("/check-payment-status", params={"paymentId": "pay_000001"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["paymentId"] == "pay_000001"
    assert body["status"] == "CONFIRMED"
    assert "updatedAt" in body
    assert resp.headers["pragma"] == "no-cache"


def test_check_status_requires_payment_id(client):
    resp = client.get("/check-payment-status")

    assert resp.status_code == 400
    assert resp.json()["error"] == "paymentId not provided"


def test_check_status_gateway_failure_is_500(client):
    resp = client.get("/check-payment-status", params={"paymentId": "pay_missing"})

    assert resp.status_code == 500
    assert resp.json()["upstreamStatus"] == 404


def test_check_status_without_api_key_is_500(client, store, fake_gateway):
    app.dependency_overrides[get_reconciler] = lambda: StatusReconciler(
        GatewayConfig(api_key="", api_base_url="https://sandbox"), store, gateway=fake_gateway
    )

    resp = client.get("/check-payment-status", params={"paymentId": "pay_1"})

    assert resp.status_code == 500
    assert fake_gateway.calls == []


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
