from __future__ import annotations

import logging

from voicetask.application.dto.webhooks import (
    RazorpayPayment,
    RazorpayPaymentCaptured,
    RazorpaySubscriptionActivated,
    RazorpaySubscriptionCancelled,
    RazorpaySubscriptionCharged,
    WebhookInput,
    WebhookOutput,
)
from voicetask.application.ports.payment_port import PaymentPort
from voicetask.application.ports.razorpay_port import RazorpayWebhookPort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import ACTIVE, CANCELLED
from voicetask.domain.exceptions import WebhookConfigurationError, WebhookSignatureError

from .common import Clock, utcnow

logger = logging.getLogger(__name__)

PROVIDER = "razorpay"


class ProcessRazorpayWebhookUseCase:
    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        payment_port: PaymentPort,
        razorpay_webhook_port: RazorpayWebhookPort,
        webhook_secret: str | None,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._payment_port = payment_port
        self._razorpay_webhook_port = razorpay_webhook_port
        self._webhook_secret = webhook_secret
        self._clock = clock

    def execute(self, command: WebhookInput) -> WebhookOutput:
        if not self._webhook_secret:
            raise WebhookConfigurationError("RAZORPAY_WEBHOOK_SECRET is not set.")

        is_valid = self._razorpay_webhook_port.is_valid_signature(
            payload=command.payload,
            signature=command.signature,
            secret=self._webhook_secret,
        )
        if not is_valid:
            raise WebhookSignatureError("Invalid Razorpay webhook signature.")

        event = self._razorpay_webhook_port.parse_event(payload=command.payload)
        now = self._clock()

        if isinstance(event, RazorpaySubscriptionActivated):
            self._subscription_port.update_by_provider_subscription_id(
                provider_subscription_id=event.subscription_id,
                status=ACTIVE,
                current_period_start=event.current_start,
                current_period_end=event.current_end,
                now=now,
            )
            return WebhookOutput(event_type=event.event_type, handled=True)

        if isinstance(event, RazorpaySubscriptionCharged):
            self._subscription_port.update_by_provider_subscription_id(
                provider_subscription_id=event.subscription_id,
                current_period_start=event.current_start,
                current_period_end=event.current_end,
                now=now,
            )
            if event.payment is not None:
                subscription = self._subscription_port.get_subscription_by_provider_id(
                    provider_subscription_id=event.subscription_id,
                )
                if subscription is not None:
                    self._record(
                        workspace_id=subscription.workspace_id,
                        subscription_id=subscription.id,
                        payment=event.payment,
                        description="Subscription renewal",
                    )
            return WebhookOutput(event_type=event.event_type, handled=True)

        if isinstance(event, RazorpaySubscriptionCancelled):
            self._subscription_port.update_by_provider_subscription_id(
                provider_subscription_id=event.subscription_id,
                status=CANCELLED,
                cancel_at_period_end=True,
                now=now,
            )
            return WebhookOutput(event_type=event.event_type, handled=True)

        if isinstance(event, RazorpayPaymentCaptured):
            workspace_id = event.payment.notes.get("workspace_id")
            if workspace_id:
                current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
                if current is not None:
                    plan_slug = event.payment.notes.get("plan_slug") or "subscription"
                    self._record(
                        workspace_id=workspace_id,
                        subscription_id=current.subscription.id,
                        payment=event.payment,
                        description=f"Payment for {plan_slug}",
                    )
            return WebhookOutput(event_type=event.event_type, handled=True)

        logger.debug("Ignoring Razorpay event %s.", event.event_type)
        return WebhookOutput(event_type=event.event_type, handled=False)

    def _record(self, *, workspace_id: str, subscription_id: str, payment: RazorpayPayment, description: str) -> None:
        inserted = self._payment_port.record_payment(
            workspace_id=workspace_id,
            subscription_id=subscription_id,
            amount=payment.amount,
            currency=payment.currency,
            provider=PROVIDER,
            provider_payment_id=payment.id,
            status="captured",
            description=description,
        )
        if not inserted:
            logger.info("Razorpay payment %s already recorded; skipping duplicate.", payment.id)
