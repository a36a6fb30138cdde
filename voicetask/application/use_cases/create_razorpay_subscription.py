from __future__ import annotations

import logging

from voicetask.application.dto.billing import (
    CreateRazorpaySubscriptionInput,
    CreateRazorpaySubscriptionOutput,
)
from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.application.ports.razorpay_port import RazorpayPort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import ACTIVE
from voicetask.domain.exceptions import BillingError, PlanNotFoundError, SubscriptionNotFoundError

from .common import Clock, utcnow

logger = logging.getLogger(__name__)

TOTAL_BILLING_CYCLES = 12


class CreateRazorpaySubscriptionUseCase:
    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        plan_catalog_port: PlanCatalogPort,
        razorpay_port: RazorpayPort,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._plan_catalog_port = plan_catalog_port
        self._razorpay_port = razorpay_port
        self._clock = clock

    def execute(self, command: CreateRazorpaySubscriptionInput) -> CreateRazorpaySubscriptionOutput:
        plan = self._plan_catalog_port.get_plan_by_slug(slug=command.plan_slug)
        if plan is None or not plan.razorpay_plan_id:
            raise PlanNotFoundError("Plan not found or Razorpay plan not configured")

        current = self._subscription_port.get_latest_subscription(workspace_id=command.workspace_id)
        if current is None:
            raise SubscriptionNotFoundError("No subscription found")
        if current.subscription.status == ACTIVE and current.subscription.provider_subscription_id:
            raise BillingError("Workspace already has an active paid subscription. Change the plan instead.")

        result = self._razorpay_port.create_subscription(
            plan_id=plan.razorpay_plan_id,
            total_count=TOTAL_BILLING_CYCLES,
            customer_notify=True,
            notes={
                "workspace_id": command.workspace_id,
                "user_id": command.user_id,
                "plan_slug": plan.slug,
            },
        )

        self._subscription_port.link_provider_subscription(
            subscription_id=current.subscription.id,
            provider="razorpay",
            provider_subscription_id=result.id,
            plan_id=plan.id,
            status=None,
            now=self._clock(),
        )
        logger.info("Linked Razorpay subscription %s to workspace %s.", result.id, command.workspace_id)
        return CreateRazorpaySubscriptionOutput(subscription_id=result.id, short_url=result.short_url)
