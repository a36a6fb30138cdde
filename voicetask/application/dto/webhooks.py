"""Typed webhook events.

Each provider payload is parsed into one of the variants below before any
state is touched. Event types the service does not act on become an
``UnrecognizedEvent`` and are acknowledged without side effects.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WebhookInput:
    signature: str
    payload: bytes


@dataclass(frozen=True)
class WebhookOutput:
    event_type: str
    handled: bool


@dataclass(frozen=True)
class UnrecognizedEvent:
    event_type: str


# Razorpay


@dataclass(frozen=True)
class RazorpayPayment:
    id: str
    amount: int
    currency: str
    notes: dict[str, str]


@dataclass(frozen=True)
class RazorpaySubscriptionActivated:
    subscription_id: str
    current_start: datetime | None
    current_end: datetime | None
    event_type: str = "subscription.activated"


@dataclass(frozen=True)
class RazorpaySubscriptionCharged:
    subscription_id: str
    current_start: datetime | None
    current_end: datetime | None
    payment: RazorpayPayment | None
    event_type: str = "subscription.charged"


@dataclass(frozen=True)
class RazorpaySubscriptionCancelled:
    subscription_id: str
    event_type: str = "subscription.cancelled"


@dataclass(frozen=True)
class RazorpayPaymentCaptured:
    payment: RazorpayPayment
    event_type: str = "payment.captured"


RazorpayWebhookEvent = (
    RazorpaySubscriptionActivated
    | RazorpaySubscriptionCharged
    | RazorpaySubscriptionCancelled
    | RazorpayPaymentCaptured
    | UnrecognizedEvent
)


# Stripe


@dataclass(frozen=True)
class StripeCheckoutCompleted:
    workspace_id: str | None
    subscription_id: str | None
    plan_slug: str | None = None
    event_type: str = "checkout.session.completed"


@dataclass(frozen=True)
class StripeInvoicePaid:
    invoice_id: str
    subscription_id: str | None
    amount_paid: int
    currency: str
    period_start: datetime | None
    period_end: datetime | None
    event_type: str = "invoice.paid"


@dataclass(frozen=True)
class StripeSubscriptionDeleted:
    subscription_id: str
    event_type: str = "customer.subscription.deleted"


StripeWebhookEvent = (
    StripeCheckoutCompleted
    | StripeInvoicePaid
    | StripeSubscriptionDeleted
    | UnrecognizedEvent
)
