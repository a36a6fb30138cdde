from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    workspace_id: str
    subscription_id: str
    amount: int
    currency: str
    provider: str
    provider_payment_id: str
    status: str
    description: str | None
    created_at: datetime
