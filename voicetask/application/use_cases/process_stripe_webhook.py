from __future__ import annotations

import logging

from voicetask.application.dto.webhooks import (
    StripeCheckoutCompleted,
    StripeInvoicePaid,
    StripeSubscriptionDeleted,
    WebhookInput,
    WebhookOutput,
)
from voicetask.application.ports.payment_port import PaymentPort
from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.application.ports.stripe_port import StripeWebhookPort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import ACTIVE, CANCELLED
from voicetask.domain.exceptions import WebhookConfigurationError

from .common import Clock, utcnow

logger = logging.getLogger(__name__)

PROVIDER = "stripe"


class ProcessStripeWebhookUseCase:
    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        payment_port: PaymentPort,
        plan_catalog_port: PlanCatalogPort,
        stripe_webhook_port: StripeWebhookPort,
        webhook_secret: str | None,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._payment_port = payment_port
        self._plan_catalog_port = plan_catalog_port
        self._stripe_webhook_port = stripe_webhook_port
        self._webhook_secret = webhook_secret
        self._clock = clock

    def execute(self, command: WebhookInput) -> WebhookOutput:
        if not self._webhook_secret:
            raise WebhookConfigurationError("STRIPE_WEBHOOK_SECRET is not set.")

        # Raises WebhookSignatureError; the router turns it into a 400.
        event = self._stripe_webhook_port.construct_event(
            payload=command.payload,
            signature=command.signature,
            secret=self._webhook_secret,
        )
        now = self._clock()

        if isinstance(event, StripeCheckoutCompleted):
            if event.workspace_id and event.subscription_id:
                current = self._subscription_port.get_latest_subscription(workspace_id=event.workspace_id)
                if current is not None:
                    plan_id = None
                    if event.plan_slug:
                        plan = self._plan_catalog_port.get_plan_by_slug(slug=event.plan_slug)
                        plan_id = plan.id if plan is not None else None
                    self._subscription_port.link_provider_subscription(
                        subscription_id=current.subscription.id,
                        provider=PROVIDER,
                        provider_subscription_id=event.subscription_id,
                        plan_id=plan_id,
                        status=ACTIVE,
                        now=now,
                    )
            return WebhookOutput(event_type=event.event_type, handled=True)

        if isinstance(event, StripeInvoicePaid):
            if event.subscription_id:
                self._subscription_port.update_by_provider_subscription_id(
                    provider_subscription_id=event.subscription_id,
                    current_period_start=event.period_start,
                    current_period_end=event.period_end,
                    now=now,
                )
                subscription = self._subscription_port.get_subscription_by_provider_id(
                    provider_subscription_id=event.subscription_id,
                )
                if subscription is not None:
                    inserted = self._payment_port.record_payment(
                        workspace_id=subscription.workspace_id,
                        subscription_id=subscription.id,
                        amount=event.amount_paid,
                        currency=event.currency,
                        provider=PROVIDER,
                        provider_payment_id=event.invoice_id,
                        status="captured",
                        description="Subscription payment",
                    )
                    if not inserted:
                        logger.info("Stripe invoice %s already recorded; skipping duplicate.", event.invoice_id)
            return WebhookOutput(event_type=event.event_type, handled=True)

        if isinstance(event, StripeSubscriptionDeleted):
            self._subscription_port.update_by_provider_subscription_id(
                provider_subscription_id=event.subscription_id,
                status=CANCELLED,
                now=now,
            )
            return WebhookOutput(event_type=event.event_type, handled=True)

        logger.debug("Ignoring Stripe event %s.", event.event_type)
        return WebhookOutput(event_type=event.event_type, handled=False)
