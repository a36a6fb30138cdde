from __future__ import annotations

from dataclasses import dataclass

from voicetask.domain.entities.plan import Plan, PlanLimits
from voicetask.domain.entities.subscription import Subscription


@dataclass(frozen=True)
class WorkspaceSubscriptionStatusOutput:
    is_active: bool
    status: str
    plan: Plan | None
    trial_days_remaining: int
    is_trialing: bool


NO_SUBSCRIPTION_STATUS = WorkspaceSubscriptionStatusOutput(
    is_active=False,
    status="none",
    plan=None,
    trial_days_remaining=0,
    is_trialing=False,
)


@dataclass(frozen=True)
class EnforcementResult:
    allowed: bool
    reason: str | None = None
    current_usage: int | None = None
    limit: int | None = None


@dataclass(frozen=True)
class UsageInfoOutput:
    current_users: int
    current_projects: int
    current_workspaces: int
    limits: PlanLimits


@dataclass(frozen=True)
class TrialReminderTarget:
    subscription: Subscription
    workspace_name: str | None
    owner_email: str | None


@dataclass(frozen=True)
class TrialReminderOutput:
    processed: int
    emails_sent: int
    expired: int
