from __future__ import annotations

import logging

from voicetask.application.dto.billing import ChangePlanInput, ChangePlanOutput
from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.application.ports.razorpay_port import RazorpayPort
from voicetask.application.ports.stripe_port import StripePort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.exceptions import BillingError, PlanNotFoundError, SubscriptionNotFoundError

from .common import Clock, utcnow

logger = logging.getLogger(__name__)


class ChangePlanUseCase:
    """Moves a paid subscription to another plan.

    The provider is updated first; a provider failure leaves the local row
    untouched. The local row keeps its provider subscription id.
    """

    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        plan_catalog_port: PlanCatalogPort,
        razorpay_port: RazorpayPort,
        stripe_port: StripePort,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._plan_catalog_port = plan_catalog_port
        self._razorpay_port = razorpay_port
        self._stripe_port = stripe_port
        self._clock = clock

    def execute(self, command: ChangePlanInput) -> ChangePlanOutput:
        current = self._subscription_port.get_latest_subscription(workspace_id=command.workspace_id)
        if current is None:
            raise SubscriptionNotFoundError("No subscription found")
        subscription = current.subscription
        if not subscription.provider_subscription_id or not subscription.payment_provider:
            raise BillingError("No payment provider subscription linked")

        new_plan = self._plan_catalog_port.get_plan_by_slug(slug=command.new_plan_slug)
        if new_plan is None:
            raise PlanNotFoundError("Plan not found or not configured")

        if subscription.payment_provider == "razorpay":
            if not new_plan.razorpay_plan_id:
                raise PlanNotFoundError("Plan not found or not configured")
            self._razorpay_port.update_subscription(
                subscription_id=subscription.provider_subscription_id,
                plan_id=new_plan.razorpay_plan_id,
            )
        else:
            if not new_plan.stripe_price_id:
                raise PlanNotFoundError("Plan not found or not configured")
            self._stripe_port.update_subscription_price(
                subscription_id=subscription.provider_subscription_id,
                price_id=new_plan.stripe_price_id,
            )

        self._subscription_port.update_plan(subscription_id=subscription.id, plan_id=new_plan.id, now=self._clock())
        logger.info("Workspace %s moved to plan %s.", command.workspace_id, new_plan.slug)
        return ChangePlanOutput(success=True, new_plan=new_plan.name)
