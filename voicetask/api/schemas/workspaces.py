from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from voicetask.api.schemas.plans import PlanLimitsResponse, PlanResponse


class CreateWorkspaceRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    slug: str
    owner_id: str


class SubscriptionStatusResponse(BaseModel):
    is_active: bool
    status: str
    plan: PlanResponse | None
    trial_days_remaining: int
    is_trialing: bool


class UsageResponse(BaseModel):
    current_users: int
    current_projects: int
    current_workspaces: int
    limits: PlanLimitsResponse


class LimitCheckResponse(BaseModel):
    allowed: bool
    reason: str | None = None
    current_usage: int | None = None
    limit: int | None = None


class WorkspaceLimitsResponse(BaseModel):
    members: LimitCheckResponse
    projects: LimitCheckResponse
    workspaces: LimitCheckResponse


class PaymentResponse(BaseModel):
    id: str
    amount: int
    currency: str
    provider: str
    provider_payment_id: str
    status: str
    description: str | None
    created_at: datetime


class ChangePlanRequest(BaseModel):
    plan_slug: str = Field(..., min_length=1)


class ChangePlanResponse(BaseModel):
    success: bool
    new_plan: str


class CancelSubscriptionResponse(BaseModel):
    success: bool
