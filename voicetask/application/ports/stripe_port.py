from __future__ import annotations

from typing import Protocol

from voicetask.application.dto.billing import StripeCheckoutSessionResult
from voicetask.application.dto.webhooks import StripeWebhookEvent


class StripePort(Protocol):
    def create_customer(self, *, email: str, name: str | None) -> str:
        ...

    def create_checkout_session(
        self,
        *,
        workspace_id: str,
        plan_slug: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        customer_id: str | None,
    ) -> StripeCheckoutSessionResult:
        ...

    def update_subscription_price(self, *, subscription_id: str, price_id: str) -> None:
        ...

    def cancel_subscription(self, *, subscription_id: str, at_period_end: bool = True) -> None:
        ...


class StripeWebhookPort(Protocol):
    def construct_event(self, *, payload: bytes, signature: str, secret: str) -> StripeWebhookEvent:
        """Raises WebhookSignatureError when the header does not verify."""
        ...
