from __future__ import annotations

from typing import Protocol


class NotificationPort(Protocol):
    def send_trial_expiry_notice(
        self,
        *,
        to: str,
        workspace_name: str,
        days_remaining: int,
        billing_url: str,
    ) -> bool:
        """Returns False when the message was not sent; never raises."""
        ...
