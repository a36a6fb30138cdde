from __future__ import annotations

from pydantic import BaseModel, Field


class CreateRazorpaySubscriptionRequest(BaseModel):
    workspace_id: str = Field(..., min_length=1)
    plan_slug: str = Field(..., min_length=1)


class CreateRazorpaySubscriptionResponse(BaseModel):
    subscription_id: str
    short_url: str


class CreateStripeCheckoutRequest(BaseModel):
    workspace_id: str = Field(..., min_length=1)
    plan_slug: str = Field(..., min_length=1)


class CreateStripeCheckoutResponse(BaseModel):
    session_id: str
    url: str | None


class TrialExpiryResponse(BaseModel):
    status: str
    processed: int
    emails_sent: int
    expired: int


class SyncProviderPlansResponse(BaseModel):
    status: str
    created: dict[str, str]
