from __future__ import annotations

import logging

from voicetask.application.dto.subscriptions import (
    NO_SUBSCRIPTION_STATUS,
    WorkspaceSubscriptionStatusOutput,
)
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import EXPIRED, TRIALING
from voicetask.domain.services.subscription_status import (
    is_subscription_active,
    is_trial_expired,
    trial_days_remaining,
)

from .common import Clock, utcnow

logger = logging.getLogger(__name__)


class GetWorkspaceSubscriptionStatusUseCase:
    """Status view of a workspace subscription.

    A trial found lapsed on read is persisted as ``expired`` before the view is
    returned. No other code path moves a trial to ``expired`` except the
    reminder sweep.
    """

    def __init__(self, *, subscription_port: SubscriptionPort, clock: Clock = utcnow):
        self._subscription_port = subscription_port
        self._clock = clock

    def execute(self, *, workspace_id: str) -> WorkspaceSubscriptionStatusOutput:
        current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
        if current is None:
            return NO_SUBSCRIPTION_STATUS

        now = self._clock()
        subscription = current.subscription

        if subscription.status == TRIALING and is_trial_expired(subscription, now=now):
            self._subscription_port.update_status(subscription_id=subscription.id, status=EXPIRED, now=now)
            logger.info("Trial expired for workspace %s (subscription %s).", workspace_id, subscription.id)
            return WorkspaceSubscriptionStatusOutput(
                is_active=False,
                status=EXPIRED,
                plan=current.plan,
                trial_days_remaining=0,
                is_trialing=False,
            )

        return WorkspaceSubscriptionStatusOutput(
            is_active=is_subscription_active(subscription, now=now),
            status=subscription.status,
            plan=current.plan,
            trial_days_remaining=trial_days_remaining(subscription, now=now),
            is_trialing=subscription.status == TRIALING,
        )
