from __future__ import annotations

from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import TRIALING, Subscription
from voicetask.domain.exceptions import PlanNotFoundError
from voicetask.domain.services.subscription_status import trial_window

from .common import Clock, utcnow


class CreateTrialSubscriptionUseCase:
    def __init__(
        self,
        *,
        plan_catalog_port: PlanCatalogPort,
        subscription_port: SubscriptionPort,
        trial_plan_slug: str = "agency",
        clock: Clock = utcnow,
    ):
        self._plan_catalog_port = plan_catalog_port
        self._subscription_port = subscription_port
        self._trial_plan_slug = trial_plan_slug
        self._clock = clock

    def execute(self, *, workspace_id: str) -> Subscription:
        plan = self._plan_catalog_port.get_plan_by_slug(slug=self._trial_plan_slug)
        if plan is None:
            raise PlanNotFoundError(f"Plan '{self._trial_plan_slug}' not found. Run the plan seed first.")

        now = self._clock()
        trial_start, trial_end = trial_window(now)
        return self._subscription_port.create_subscription(
            workspace_id=workspace_id,
            plan_id=plan.id,
            status=TRIALING,
            trial_start=trial_start,
            trial_end=trial_end,
            now=now,
        )
