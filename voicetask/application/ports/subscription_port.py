from __future__ import annotations

from datetime import datetime
from typing import Protocol

from voicetask.application.dto.subscriptions import TrialReminderTarget
from voicetask.domain.entities.subscription import Subscription, SubscriptionWithPlan


class SubscriptionPort(Protocol):
    def get_latest_subscription(self, *, workspace_id: str) -> SubscriptionWithPlan | None:
        ...

    def get_subscription_by_provider_id(self, *, provider_subscription_id: str) -> Subscription | None:
        ...

    def create_subscription(
        self,
        *,
        workspace_id: str,
        plan_id: str,
        status: str,
        trial_start: datetime | None,
        trial_end: datetime | None,
        now: datetime,
    ) -> Subscription:
        ...

    def update_status(self, *, subscription_id: str, status: str, now: datetime) -> None:
        ...

    def update_plan(self, *, subscription_id: str, plan_id: str, now: datetime) -> None:
        ...

    def set_cancel_at_period_end(self, *, subscription_id: str, now: datetime) -> None:
        ...

    def link_provider_subscription(
        self,
        *,
        subscription_id: str,
        provider: str,
        provider_subscription_id: str,
        plan_id: str | None,
        status: str | None,
        now: datetime,
    ) -> None:
        ...

    def update_by_provider_subscription_id(
        self,
        *,
        provider_subscription_id: str,
        now: datetime,
        status: str | None = None,
        current_period_start: datetime | None = None,
        current_period_end: datetime | None = None,
        cancel_at_period_end: bool | None = None,
    ) -> int:
        ...

    def list_trialing_subscriptions(self) -> list[TrialReminderTarget]:
        ...
