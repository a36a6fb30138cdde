from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from fakes import FakePlanCatalog, FakeSubscriptionStore, fixed_clock, make_plan, make_subscription
from voicetask.api.deps import get_razorpay_webhook_use_case_factory, get_stripe_webhook_use_case_factory
from voicetask.application.use_cases.process_razorpay_webhook import ProcessRazorpayWebhookUseCase
from voicetask.infrastructure.clients.razorpay_client import RazorpayWebhookVerifier
from voicetask.infrastructure.security.webhook_signatures import compute_razorpay_signature
from voicetask.main import app


SECRET = "rzp_router_secret"


class ExplodingUseCase:
    def execute(self, _command):
        raise RuntimeError("database is down")


@pytest.fixture
def store():
    catalog = FakePlanCatalog([make_plan()])
    return FakeSubscriptionStore(
        catalog,
        [make_subscription(status="trialing", payment_provider="razorpay", provider_subscription_id="sub_X")],
    )


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_razorpay(store, *, secret: str | None = SECRET):
    app.dependency_overrides[get_razorpay_webhook_use_case_factory] = lambda: lambda: ProcessRazorpayWebhookUseCase(
        subscription_port=store,
        payment_port=store,
        razorpay_webhook_port=RazorpayWebhookVerifier(),
        webhook_secret=secret,
        clock=fixed_clock(),
    )


def _activated_body() -> bytes:
    return json.dumps(
        {
            "event": "subscription.activated",
            "payload": {
                "subscription": {"entity": {"id": "sub_X", "current_start": 1700000000, "current_end": 1702592000}}
            },
        }
    ).encode("utf-8")


def test_razorpay_activation_returns_ok_and_updates_subscription(client, store):
    _use_razorpay(store)
    body = _activated_body()

    response = client.post(
        "/webhook/razorpay",
        content=body,
        headers={"x-razorpay-signature": compute_razorpay_signature(body, SECRET)},
    )

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert store.subscriptions["sub-1"].status == "active"


def test_razorpay_unknown_event_returns_ok_without_mutation(client, store):
    _use_razorpay(store)
    body = b'{"event":"order.paid","payload":{}}'

    response = client.post(
        "/webhook/razorpay",
        content=body,
        headers={"x-razorpay-signature": compute_razorpay_signature(body, SECRET)},
    )

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert store.writes == 0


def test_missing_signature_header_is_400(client, store):
    _use_razorpay(store)

    response = client.post("/webhook/razorpay", content=_activated_body())

    assert response.status_code == 400
    assert response.json() == {"error": "Missing signature header"}


def test_invalid_signature_is_400(client, store):
    _use_razorpay(store)

    response = client.post(
        "/webhook/razorpay",
        content=_activated_body(),
        headers={"x-razorpay-signature": "0" * 64},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid signature"}
    assert store.subscriptions["sub-1"].status == "trialing"


def test_missing_webhook_secret_is_500(client, store):
    _use_razorpay(store, secret="")
    body = _activated_body()

    response = client.post(
        "/webhook/razorpay",
        content=body,
        headers={"x-razorpay-signature": compute_razorpay_signature(body, SECRET)},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Webhook secret not configured"}


def test_unexpected_failure_is_500(client):
    app.dependency_overrides[get_stripe_webhook_use_case_factory] = lambda: ExplodingUseCase

    response = client.post("/webhook/stripe", content=b"{}", headers={"stripe-signature": "t=1,v1=abc"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_stripe_missing_signature_header_is_400(client):
    app.dependency_overrides[get_stripe_webhook_use_case_factory] = lambda: ExplodingUseCase

    response = client.post("/webhook/stripe", content=b"{}")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing signature header"}


def test_missing_database_config_uses_error_envelope(client, monkeypatch):
    monkeypatch.setenv("POSTGRES_DSN", "")
    monkeypatch.setenv("RAZORPAY_WEBHOOK_SECRET", SECRET)
    body = _activated_body()

    response = client.post(
        "/webhook/razorpay",
        content=body,
        headers={"x-razorpay-signature": compute_razorpay_signature(body, SECRET)},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_missing_signature_is_checked_before_building_the_handler(client, monkeypatch):
    monkeypatch.setenv("POSTGRES_DSN", "")

    response = client.post("/webhook/stripe", content=b"{}")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing signature header"}
