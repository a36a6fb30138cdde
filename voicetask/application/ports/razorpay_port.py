from __future__ import annotations

from typing import Protocol

from voicetask.application.dto.billing import RazorpaySubscriptionResult
from voicetask.application.dto.webhooks import RazorpayWebhookEvent


class RazorpayPort(Protocol):
    def create_plan(self, *, name: str, amount: int, currency: str, period: str, interval: int) -> str:
        ...

    def create_subscription(
        self,
        *,
        plan_id: str,
        total_count: int,
        customer_notify: bool,
        notes: dict[str, str] | None,
    ) -> RazorpaySubscriptionResult:
        ...

    def update_subscription(self, *, subscription_id: str, plan_id: str) -> None:
        ...

    def cancel_subscription(self, *, subscription_id: str, cancel_at_cycle_end: bool = True) -> None:
        ...


class RazorpayWebhookPort(Protocol):
    def is_valid_signature(self, *, payload: bytes, signature: str, secret: str) -> bool:
        ...

    def parse_event(self, *, payload: bytes) -> RazorpayWebhookEvent:
        ...
