from __future__ import annotations

from fastapi import APIRouter, Depends

from voicetask.api.deps import get_list_plans_use_case
from voicetask.api.schemas.plans import PlanLimitsResponse, PlanResponse
from voicetask.application.use_cases.list_plans import ListPlansUseCase
from voicetask.domain.entities.plan import Plan, PlanLimits


router = APIRouter()


@router.get("/v1/plans", response_model=list[PlanResponse])
def list_plans(use_case: ListPlansUseCase = Depends(get_list_plans_use_case)):
    return [to_plan_response(plan) for plan in use_case.execute()]


def to_plan_response(plan: Plan) -> PlanResponse:
    return PlanResponse(
        id=plan.id,
        name=plan.name,
        slug=plan.slug,
        price_inr=plan.price_inr,
        price_usd=plan.price_usd,
        max_users=plan.max_users,
        max_projects=plan.max_projects,
        max_workspaces=plan.max_workspaces,
        max_storage_mb=plan.max_storage_mb,
        features=list(plan.features),
    )


def to_plan_limits_response(limits: PlanLimits) -> PlanLimitsResponse:
    return PlanLimitsResponse(
        max_users=limits.max_users,
        max_projects=limits.max_projects,
        max_workspaces=limits.max_workspaces,
        max_storage_mb=limits.max_storage_mb,
        features=list(limits.features),
    )
