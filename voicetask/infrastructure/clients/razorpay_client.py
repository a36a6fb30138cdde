from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from voicetask.application.dto.billing import RazorpaySubscriptionResult
from voicetask.application.dto.webhooks import (
    RazorpayPayment,
    RazorpayPaymentCaptured,
    RazorpaySubscriptionActivated,
    RazorpaySubscriptionCancelled,
    RazorpaySubscriptionCharged,
    RazorpayWebhookEvent,
    UnrecognizedEvent,
)
from voicetask.application.ports.razorpay_port import RazorpayPort, RazorpayWebhookPort
from voicetask.domain.exceptions import ProviderRequestError
from voicetask.infrastructure.security.webhook_signatures import verify_razorpay_signature

logger = logging.getLogger(__name__)


class RazorpayClient(RazorpayPort):
    def __init__(self, *, key_id: str, key_secret: str, api_base: str, timeout_seconds: float):
        self._auth = (key_id, key_secret)
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout_seconds

    def create_plan(self, *, name: str, amount: int, currency: str, period: str, interval: int) -> str:
        payload = {
            "period": period,
            "interval": interval,
            "item": {"name": name, "amount": amount, "currency": currency},
        }
        data = self._request("POST", "/plans", payload)
        plan_id = data.get("id")
        if not plan_id:
            raise ProviderRequestError("Razorpay plan id is missing.")
        return str(plan_id)

    def create_subscription(
        self,
        *,
        plan_id: str,
        total_count: int,
        customer_notify: bool,
        notes: dict[str, str] | None,
    ) -> RazorpaySubscriptionResult:
        payload: dict[str, Any] = {
            "plan_id": plan_id,
            "total_count": total_count,
            "customer_notify": 1 if customer_notify else 0,
        }
        if notes:
            payload["notes"] = notes
        data = self._request("POST", "/subscriptions", payload)
        subscription_id = data.get("id")
        short_url = data.get("short_url")
        if not subscription_id or not short_url:
            raise ProviderRequestError("Razorpay subscription response is incomplete.")
        return RazorpaySubscriptionResult(id=str(subscription_id), short_url=str(short_url))

    def update_subscription(self, *, subscription_id: str, plan_id: str) -> None:
        self._request("PATCH", f"/subscriptions/{subscription_id}", {"plan_id": plan_id})

    def cancel_subscription(self, *, subscription_id: str, cancel_at_cycle_end: bool = True) -> None:
        self._request(
            "POST",
            f"/subscriptions/{subscription_id}/cancel",
            {"cancel_at_cycle_end": 1 if cancel_at_cycle_end else 0},
        )

    def _request(self, method: str, path: str, payload: dict) -> dict:
        url = f"{self._api_base}{path}"
        try:
            with httpx.Client(timeout=self._timeout, auth=self._auth) as client:
                response = client.request(method, url, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Razorpay %s %s failed status=%s body=%s",
                method,
                path,
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise ProviderRequestError(f"Razorpay request failed with status {exc.response.status_code}.") from exc
        except httpx.HTTPError as exc:
            logger.warning("Razorpay %s %s failed: %s", method, path, exc)
            raise ProviderRequestError("Razorpay request failed.") from exc


class RazorpayWebhookVerifier(RazorpayWebhookPort):
    def is_valid_signature(self, *, payload: bytes, signature: str, secret: str) -> bool:
        return verify_razorpay_signature(payload, signature, secret)

    def parse_event(self, *, payload: bytes) -> RazorpayWebhookEvent:
        return parse_razorpay_event(payload)


def parse_razorpay_event(payload: bytes) -> RazorpayWebhookEvent:
    event = json.loads(payload)
    event_type = str(event.get("event", ""))
    entities = event.get("payload") or {}

    if event_type == "subscription.activated":
        subscription = entities["subscription"]["entity"]
        return RazorpaySubscriptionActivated(
            subscription_id=str(subscription["id"]),
            current_start=_to_datetime(subscription.get("current_start")),
            current_end=_to_datetime(subscription.get("current_end")),
        )

    if event_type == "subscription.charged":
        subscription = entities["subscription"]["entity"]
        payment = (entities.get("payment") or {}).get("entity")
        return RazorpaySubscriptionCharged(
            subscription_id=str(subscription["id"]),
            current_start=_to_datetime(subscription.get("current_start")),
            current_end=_to_datetime(subscription.get("current_end")),
            payment=_to_payment(payment) if payment else None,
        )

    if event_type == "subscription.cancelled":
        subscription = entities["subscription"]["entity"]
        return RazorpaySubscriptionCancelled(subscription_id=str(subscription["id"]))

    if event_type == "payment.captured":
        return RazorpayPaymentCaptured(payment=_to_payment(entities["payment"]["entity"]))

    return UnrecognizedEvent(event_type=event_type)


def _to_payment(entity: dict) -> RazorpayPayment:
    notes = entity.get("notes")
    # Razorpay sends an empty list when a payment carries no notes.
    if not isinstance(notes, dict):
        notes = {}
    return RazorpayPayment(
        id=str(entity["id"]),
        amount=int(entity.get("amount") or 0),
        currency=str(entity.get("currency") or "inr").upper(),
        notes={str(key): str(value) for key, value in notes.items()},
    )


def _to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
