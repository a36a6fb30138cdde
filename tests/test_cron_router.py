from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from fakes import NOW, FakeNotifier, FakePlanCatalog, FakeSubscriptionStore, fixed_clock, make_plan, make_subscription
from voicetask.api.deps import get_send_trial_expiry_reminders_use_case
from voicetask.application.dto.subscriptions import TrialReminderTarget
from voicetask.application.use_cases.send_trial_expiry_reminders import SendTrialExpiryRemindersUseCase
from voicetask.main import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("CRON_SECRET", "cron-s3cret")
    subscription = make_subscription(status="trialing", trial_end=NOW + timedelta(days=1))
    store = FakeSubscriptionStore(FakePlanCatalog([make_plan()]), [subscription])
    store.trial_targets = [
        TrialReminderTarget(subscription=subscription, workspace_name="Acme", owner_email="owner@example.com")
    ]
    app.dependency_overrides[get_send_trial_expiry_reminders_use_case] = lambda: SendTrialExpiryRemindersUseCase(
        subscription_port=store,
        notification_port=FakeNotifier(),
        billing_url="https://app.example.com/billing",
        clock=fixed_clock(),
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_trial_expiry_job_requires_secret(client):
    response = client.post("/v1/cron/trial-expiry")

    assert response.status_code == 401


def test_trial_expiry_job_reports_counts(client):
    response = client.post("/v1/cron/trial-expiry", headers={"x-cron-secret": "cron-s3cret"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "processed": 1, "emails_sent": 1, "expired": 0}


def test_trial_expiry_job_rejects_wrong_secret(client):
    response = client.post("/v1/cron/trial-expiry", headers={"x-cron-secret": "not-it"})

    assert response.status_code == 401


def test_trial_expiry_job_rejects_non_ascii_secret(client):
    response = client.post("/v1/cron/trial-expiry", headers={"x-cron-secret": "café".encode("latin-1")})

    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}
