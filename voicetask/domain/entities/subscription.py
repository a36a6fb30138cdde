from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from voicetask.domain.entities.plan import Plan


SubscriptionStatus = Literal["trialing", "active", "cancelled", "expired"]
PaymentProvider = Literal["razorpay", "stripe"]

TRIALING = "trialing"
ACTIVE = "active"
CANCELLED = "cancelled"
EXPIRED = "expired"


@dataclass(frozen=True)
class Subscription:
    id: str
    workspace_id: str
    plan_id: str
    status: SubscriptionStatus
    trial_start: datetime | None
    trial_end: datetime | None
    current_period_start: datetime | None
    current_period_end: datetime | None
    payment_provider: PaymentProvider | None
    provider_subscription_id: str | None
    cancel_at_period_end: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SubscriptionWithPlan:
    subscription: Subscription
    plan: Plan
