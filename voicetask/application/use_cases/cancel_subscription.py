from __future__ import annotations

import logging

from voicetask.application.ports.razorpay_port import RazorpayPort
from voicetask.application.ports.stripe_port import StripePort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.exceptions import BillingError, SubscriptionNotFoundError

from .common import Clock, utcnow

logger = logging.getLogger(__name__)


class CancelSubscriptionUseCase:
    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        razorpay_port: RazorpayPort,
        stripe_port: StripePort,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._razorpay_port = razorpay_port
        self._stripe_port = stripe_port
        self._clock = clock

    def execute(self, *, workspace_id: str) -> None:
        current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
        if current is None:
            raise SubscriptionNotFoundError("No subscription found")
        subscription = current.subscription
        if not subscription.provider_subscription_id or not subscription.payment_provider:
            raise BillingError("No payment provider subscription linked")

        if subscription.payment_provider == "razorpay":
            self._razorpay_port.cancel_subscription(
                subscription_id=subscription.provider_subscription_id,
                cancel_at_cycle_end=True,
            )
        else:
            self._stripe_port.cancel_subscription(
                subscription_id=subscription.provider_subscription_id,
                at_period_end=True,
            )

        self._subscription_port.set_cancel_at_period_end(subscription_id=subscription.id, now=self._clock())
        logger.info("Workspace %s subscription set to cancel at period end.", workspace_id)
