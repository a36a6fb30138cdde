from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import stripe

from voicetask.application.dto.billing import StripeCheckoutSessionResult
from voicetask.application.dto.webhooks import (
    StripeCheckoutCompleted,
    StripeInvoicePaid,
    StripeSubscriptionDeleted,
    StripeWebhookEvent,
    UnrecognizedEvent,
)
from voicetask.application.ports.stripe_port import StripePort, StripeWebhookPort
from voicetask.domain.exceptions import ProviderRequestError, WebhookSignatureError

logger = logging.getLogger(__name__)


class StripeClient(StripePort):
    def __init__(self, *, secret_key: str):
        self._secret_key = secret_key

    def create_customer(self, *, email: str, name: str | None) -> str:
        params: dict = {"email": email}
        if name:
            params["name"] = name
        try:
            customer = stripe.Customer.create(api_key=self._secret_key, **params)
        except Exception as exc:  # pragma: no cover - external API
            raise ProviderRequestError("Failed to create Stripe customer.") from exc

        customer_id = getattr(customer, "id", None)
        if not customer_id:
            raise ProviderRequestError("Stripe customer id is missing.")
        return str(customer_id)

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
        payload: dict = {
            "mode": "subscription",
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": {"workspace_id": workspace_id, "plan_slug": plan_slug},
        }
        if customer_id:
            payload["customer"] = customer_id

        try:
            session = stripe.checkout.Session.create(api_key=self._secret_key, **payload)
        except Exception as exc:  # pragma: no cover - external API
            raise ProviderRequestError("Failed to create Stripe checkout session.") from exc

        session_id = getattr(session, "id", None)
        if not session_id:
            raise ProviderRequestError("Stripe checkout session response is incomplete.")
        return StripeCheckoutSessionResult(id=str(session_id), url=getattr(session, "url", None))

    def update_subscription_price(self, *, subscription_id: str, price_id: str) -> None:
        try:
            subscription = stripe.Subscription.retrieve(subscription_id, api_key=self._secret_key)
            item_id = subscription["items"]["data"][0]["id"]
            stripe.Subscription.modify(
                subscription_id,
                api_key=self._secret_key,
                items=[{"id": item_id, "price": price_id}],
                proration_behavior="create_prorations",
            )
        except Exception as exc:  # pragma: no cover - external API
            raise ProviderRequestError("Failed to update Stripe subscription.") from exc

    def cancel_subscription(self, *, subscription_id: str, at_period_end: bool = True) -> None:
        try:
            stripe.Subscription.modify(
                subscription_id,
                api_key=self._secret_key,
                cancel_at_period_end=at_period_end,
            )
        except Exception as exc:  # pragma: no cover - external API
            raise ProviderRequestError("Failed to cancel Stripe subscription.") from exc


class StripeWebhookVerifier(StripeWebhookPort):
    def construct_event(self, *, payload: bytes, signature: str, secret: str) -> StripeWebhookEvent:
        try:
            stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=secret)
        except Exception as exc:
            raise WebhookSignatureError("Invalid Stripe webhook signature.") from exc
        return parse_stripe_event(payload)


def parse_stripe_event(payload: bytes) -> StripeWebhookEvent:
    event = json.loads(payload)
    event_type = str(event.get("type", ""))
    data_object = (event.get("data") or {}).get("object") or {}

    if event_type == "checkout.session.completed":
        metadata = data_object.get("metadata") or {}
        return StripeCheckoutCompleted(
            workspace_id=metadata.get("workspace_id"),
            subscription_id=_object_id(data_object.get("subscription")),
            plan_slug=metadata.get("plan_slug"),
        )

    if event_type == "invoice.paid":
        return StripeInvoicePaid(
            invoice_id=str(data_object["id"]),
            subscription_id=_invoice_subscription_id(data_object),
            amount_paid=int(data_object.get("amount_paid") or 0),
            currency=str(data_object.get("currency") or "usd").upper(),
            period_start=_to_datetime(data_object.get("period_start")),
            period_end=_to_datetime(data_object.get("period_end")),
        )

    if event_type == "customer.subscription.deleted":
        return StripeSubscriptionDeleted(subscription_id=str(data_object["id"]))

    return UnrecognizedEvent(event_type=event_type)


def _invoice_subscription_id(invoice: dict) -> str | None:
    subscription_id = _object_id(invoice.get("subscription"))
    if subscription_id:
        return subscription_id
    # Newer API versions move the reference under parent.subscription_details.
    details = (invoice.get("parent") or {}).get("subscription_details") or {}
    return _object_id(details.get("subscription"))


def _object_id(value) -> str | None:
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get("id")
    return None


def _to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
