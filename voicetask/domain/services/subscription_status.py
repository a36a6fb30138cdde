from __future__ import annotations

import math
from datetime import datetime, timedelta

from voicetask.domain.entities.subscription import ACTIVE, TRIALING, Subscription


TRIAL_LENGTH = timedelta(days=14)
_SECONDS_PER_DAY = 24 * 60 * 60


def trial_window(now: datetime) -> tuple[datetime, datetime]:
    return now, now + TRIAL_LENGTH


def is_trial_expired(subscription: Subscription, *, now: datetime) -> bool:
    """A trial without an end date is treated as not applicable, never expired."""
    if subscription.status != TRIALING:
        return False
    if subscription.trial_end is None:
        return False
    return now > subscription.trial_end


def trial_days_remaining(subscription: Subscription, *, now: datetime) -> int:
    if subscription.status != TRIALING or subscription.trial_end is None:
        return 0
    seconds = (subscription.trial_end - now).total_seconds()
    return max(0, math.ceil(seconds / _SECONDS_PER_DAY))


def is_subscription_active(subscription: Subscription, *, now: datetime) -> bool:
    if subscription.status == ACTIVE:
        return True
    if subscription.status == TRIALING and not is_trial_expired(subscription, now=now):
        return True
    return False
