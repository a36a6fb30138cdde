from __future__ import annotations

import logging

from voicetask.application.dto.subscriptions import TrialReminderOutput
from voicetask.application.ports.notification_port import NotificationPort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import EXPIRED
from voicetask.domain.services.subscription_status import is_trial_expired, trial_days_remaining

from .common import Clock, utcnow

logger = logging.getLogger(__name__)

WARNING_DAYS = frozenset({4, 2, 1, 0})


class SendTrialExpiryRemindersUseCase:
    """E-mails owners of trials about to end, then expires lapsed trials."""

    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        notification_port: NotificationPort,
        billing_url: str,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._notification_port = notification_port
        self._billing_url = billing_url
        self._clock = clock

    def execute(self) -> TrialReminderOutput:
        targets = self._subscription_port.list_trialing_subscriptions()
        now = self._clock()
        processed = 0
        emails_sent = 0
        expired = 0

        for target in targets:
            processed += 1
            subscription = target.subscription
            if subscription.trial_end is None:
                continue

            days_remaining = trial_days_remaining(subscription, now=now)
            if days_remaining in WARNING_DAYS and target.owner_email:
                sent = self._notification_port.send_trial_expiry_notice(
                    to=target.owner_email,
                    workspace_name=target.workspace_name or "Your workspace",
                    days_remaining=days_remaining,
                    billing_url=self._billing_url,
                )
                if sent:
                    emails_sent += 1

            if is_trial_expired(subscription, now=now):
                self._subscription_port.update_status(subscription_id=subscription.id, status=EXPIRED, now=now)
                expired += 1

        logger.info("Trial sweep processed=%s emails_sent=%s expired=%s.", processed, emails_sent, expired)
        return TrialReminderOutput(processed=processed, emails_sent=emails_sent, expired=expired)
