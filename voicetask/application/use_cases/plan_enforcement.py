from __future__ import annotations

import logging

from voicetask.application.dto.subscriptions import EnforcementResult
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.domain.exceptions import SubscriptionInactiveError, SubscriptionNotFoundError
from voicetask.domain.services.plan_limits import get_plan_limits, is_unlimited, within_limit
from voicetask.domain.services.subscription_status import is_subscription_active

from .common import Clock, utcnow

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_ALLOWANCE = 1


class PlanEnforcementUseCase:
    """Allow/deny checks for actions bounded by the workspace plan.

    Usage is counted at decision time without a lock; two concurrent adds can
    both pass when one slot is left.
    """

    def __init__(
        self,
        *,
        subscription_port: SubscriptionPort,
        workspace_port: WorkspacePort,
        clock: Clock = utcnow,
    ):
        self._subscription_port = subscription_port
        self._workspace_port = workspace_port
        self._clock = clock

    def can_add_member(self, *, workspace_id: str) -> EnforcementResult:
        return self._check_workspace_limit(
            workspace_id=workspace_id,
            limit_name="max_users",
            noun="members",
            count=lambda: self._workspace_port.count_members(workspace_id=workspace_id),
        )

    def can_add_project(self, *, workspace_id: str) -> EnforcementResult:
        return self._check_workspace_limit(
            workspace_id=workspace_id,
            limit_name="max_projects",
            noun="projects",
            count=lambda: self._workspace_port.count_projects(workspace_id=workspace_id),
        )

    def can_create_workspace(self, *, user_id: str) -> EnforcementResult:
        workspace_ids = self._workspace_port.list_user_workspace_ids(user_id=user_id)
        workspace_count = len(workspace_ids)
        max_workspaces = DEFAULT_WORKSPACE_ALLOWANCE
        now = self._clock()

        # The best plan among all memberships governs the user.
        for workspace_id in workspace_ids:
            current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
            if current is None or not is_subscription_active(current.subscription, now=now):
                continue
            limit = get_plan_limits(current.plan).max_workspaces
            if is_unlimited(limit):
                return EnforcementResult(allowed=True)
            max_workspaces = max(max_workspaces, limit)

        if workspace_count >= max_workspaces:
            logger.info("User %s reached workspace limit (%s/%s).", user_id, workspace_count, max_workspaces)
            return EnforcementResult(
                allowed=False,
                reason=f"Plan limit reached ({workspace_count}/{max_workspaces} workspaces)",
                current_usage=workspace_count,
                limit=max_workspaces,
            )
        return EnforcementResult(allowed=True, current_usage=workspace_count, limit=max_workspaces)

    def require_active_subscription(self, *, workspace_id: str) -> None:
        current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
        if current is None:
            raise SubscriptionNotFoundError("No subscription found. Please subscribe to a plan.")
        if not is_subscription_active(current.subscription, now=self._clock()):
            raise SubscriptionInactiveError("Your subscription has expired. Please upgrade to continue.")

    def _check_workspace_limit(self, *, workspace_id: str, limit_name: str, noun: str, count) -> EnforcementResult:
        current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
        if current is None:
            return EnforcementResult(allowed=False, reason="No active subscription")
        if not is_subscription_active(current.subscription, now=self._clock()):
            return EnforcementResult(allowed=False, reason="Subscription is not active")

        limit = getattr(get_plan_limits(current.plan), limit_name)
        if is_unlimited(limit):
            return EnforcementResult(allowed=True)

        usage = count()
        if not within_limit(current=usage, limit=limit):
            logger.info("Workspace %s reached %s limit (%s/%s).", workspace_id, noun, usage, limit)
            return EnforcementResult(
                allowed=False,
                reason=f"Plan limit reached ({usage}/{limit} {noun})",
                current_usage=usage,
                limit=limit,
            )
        return EnforcementResult(allowed=True, current_usage=usage, limit=limit)
