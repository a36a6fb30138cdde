from __future__ import annotations

from voicetask.application.ports.payment_port import PaymentPort
from voicetask.domain.entities.payment import PaymentRecord

PAYMENT_HISTORY_LIMIT = 20


class GetPaymentHistoryUseCase:
    def __init__(self, *, payment_port: PaymentPort):
        self._payment_port = payment_port

    def execute(self, *, workspace_id: str) -> list[PaymentRecord]:
        return self._payment_port.list_payments(workspace_id=workspace_id, limit=PAYMENT_HISTORY_LIMIT)
