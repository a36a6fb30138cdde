from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from fakes import NOW, FakePlanCatalog, FakeSubscriptionStore, FakeWorkspaceStore, fixed_clock, make_plan, make_subscription
from voicetask.api import deps
from voicetask.api.deps import (
    get_current_user_id,
    require_active_subscription,
    require_cron_secret,
    require_workspace_member,
)
from voicetask.application.use_cases.plan_enforcement import PlanEnforcementUseCase
from voicetask.infrastructure.security.token_service import JwtTokenService


def _enforcement(subscriptions):
    store = FakeSubscriptionStore(FakePlanCatalog([make_plan()]), subscriptions)
    return PlanEnforcementUseCase(subscription_port=store, workspace_port=FakeWorkspaceStore(), clock=fixed_clock())


def test_require_active_subscription_allows_running_trial():
    enforcement = _enforcement([make_subscription(status="trialing", trial_end=NOW + timedelta(days=2))])

    assert require_active_subscription(workspace_id="ws-1", user_id="user-1", enforcement=enforcement) == "user-1"


def test_require_active_subscription_blocks_expired():
    enforcement = _enforcement([make_subscription(status="expired")])

    with pytest.raises(HTTPException) as exc_info:
        require_active_subscription(workspace_id="ws-1", user_id="user-1", enforcement=enforcement)

    assert exc_info.value.status_code == 403


def test_require_active_subscription_without_row_is_404():
    with pytest.raises(HTTPException) as exc_info:
        require_active_subscription(workspace_id="ws-1", user_id="user-1", enforcement=_enforcement([]))

    assert exc_info.value.status_code == 404


def test_require_workspace_member():
    workspaces = FakeWorkspaceStore()
    workspaces.add_workspace("ws-1", members=1)

    assert require_workspace_member(workspace_id="ws-1", user_id="user-1", workspace_port=workspaces) == "user-1"
    with pytest.raises(HTTPException) as exc_info:
        require_workspace_member(workspace_id="ws-1", user_id="intruder", workspace_port=workspaces)
    assert exc_info.value.status_code == 403


@pytest.mark.parametrize("header", [None, "", "wrong"])
def test_cron_secret_rejects_missing_or_wrong(monkeypatch, header):
    monkeypatch.setenv("CRON_SECRET", "cron-s3cret")

    with pytest.raises(HTTPException) as exc_info:
        require_cron_secret(x_cron_secret=header)

    assert exc_info.value.status_code == 401


def test_cron_secret_rejects_everything_when_unset(monkeypatch):
    monkeypatch.setenv("CRON_SECRET", "")

    with pytest.raises(HTTPException):
        require_cron_secret(x_cron_secret="")


def test_cron_secret_accepts_match(monkeypatch):
    monkeypatch.setenv("CRON_SECRET", "cron-s3cret")

    assert require_cron_secret(x_cron_secret="cron-s3cret") is None


def test_current_user_from_bearer_token(monkeypatch):
    service = JwtTokenService(jwt_secret="test-jwt-secret")
    monkeypatch.setattr(deps, "_get_token_service", lambda: service)
    workspaces = FakeWorkspaceStore()
    workspaces.add_user("user-1")
    token = service.create_access_token(user_id="user-1", now=datetime.now(timezone.utc))

    assert get_current_user_id(authorization=f"Bearer {token}", workspace_port=workspaces) == "user-1"


@pytest.mark.parametrize("authorization", [None, "Token abc", "Bearer ", "Bearer not-a-jwt"])
def test_current_user_rejects_bad_headers(monkeypatch, authorization):
    monkeypatch.setattr(deps, "_get_token_service", lambda: JwtTokenService(jwt_secret="test-jwt-secret"))

    with pytest.raises(HTTPException) as exc_info:
        get_current_user_id(authorization=authorization, workspace_port=FakeWorkspaceStore())

    assert exc_info.value.status_code == 401


def test_current_user_must_exist(monkeypatch):
    service = JwtTokenService(jwt_secret="test-jwt-secret")
    monkeypatch.setattr(deps, "_get_token_service", lambda: service)
    token = service.create_access_token(user_id="ghost", now=datetime.now(timezone.utc))

    with pytest.raises(HTTPException) as exc_info:
        get_current_user_id(authorization=f"Bearer {token}", workspace_port=FakeWorkspaceStore())

    assert exc_info.value.status_code == 401
