from __future__ import annotations

from voicetask.domain.entities.plan import UNLIMITED, Plan, PlanLimits


def get_plan_limits(plan: Plan) -> PlanLimits:
    return PlanLimits(
        max_users=plan.max_users,
        max_projects=plan.max_projects,
        max_workspaces=plan.max_workspaces,
        max_storage_mb=plan.max_storage_mb,
        features=tuple(plan.features or ()),
    )


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def within_limit(*, current: int, limit: int) -> bool:
    if is_unlimited(limit):
        return True
    return current < limit
