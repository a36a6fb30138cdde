from __future__ import annotations

from typing import Protocol

from voicetask.domain.entities.payment import PaymentRecord


class PaymentPort(Protocol):
    def record_payment(
        self,
        *,
        workspace_id: str,
        subscription_id: str,
        amount: int,
        currency: str,
        provider: str,
        provider_payment_id: str,
        status: str,
        description: str | None,
    ) -> bool:
        ...

    def list_payments(self, *, workspace_id: str, limit: int = 20) -> list[PaymentRecord]:
        ...
