from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CreateWorkspaceInput:
    user_id: str
    name: str


@dataclass(frozen=True)
class CreateStripeCheckoutInput:
    workspace_id: str
    plan_slug: str
    user_id: str
    success_url: str
    cancel_url: str


@dataclass(frozen=True)
class CreateStripeCheckoutOutput:
    session_id: str
    url: str | None


@dataclass(frozen=True)
class StripeCheckoutSessionResult:
    id: str
    url: str | None


@dataclass(frozen=True)
class CreateRazorpaySubscriptionInput:
    workspace_id: str
    plan_slug: str
    user_id: str


@dataclass(frozen=True)
class CreateRazorpaySubscriptionOutput:
    subscription_id: str
    short_url: str


@dataclass(frozen=True)
class RazorpaySubscriptionResult:
    id: str
    short_url: str


@dataclass(frozen=True)
class ChangePlanInput:
    workspace_id: str
    new_plan_slug: str


@dataclass(frozen=True)
class ChangePlanOutput:
    success: bool
    new_plan: str


@dataclass(frozen=True)
class SyncProviderPlansOutput:
    created: dict[str, str]
