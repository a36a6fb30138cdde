from __future__ import annotations

from voicetask.application.dto.subscriptions import UsageInfoOutput
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.domain.entities.plan import DEFAULT_PLAN_LIMITS
from voicetask.domain.services.plan_limits import get_plan_limits


class GetUsageInfoUseCase:
    def __init__(self, *, subscription_port: SubscriptionPort, workspace_port: WorkspacePort):
        self._subscription_port = subscription_port
        self._workspace_port = workspace_port

    def execute(self, *, workspace_id: str, user_id: str) -> UsageInfoOutput:
        current = self._subscription_port.get_latest_subscription(workspace_id=workspace_id)
        if current is None:
            return UsageInfoOutput(
                current_users=0,
                current_projects=0,
                current_workspaces=0,
                limits=DEFAULT_PLAN_LIMITS,
            )

        return UsageInfoOutput(
            current_users=self._workspace_port.count_members(workspace_id=workspace_id),
            current_projects=self._workspace_port.count_projects(workspace_id=workspace_id),
            current_workspaces=len(self._workspace_port.list_user_workspace_ids(user_id=user_id)),
            limits=get_plan_limits(current.plan),
        )
