from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from voicetask.api.deps import (
    get_cancel_subscription_use_case,
    get_change_plan_use_case,
    get_create_workspace_use_case,
    get_current_user_id,
    get_payment_history_use_case,
    get_plan_enforcement_use_case,
    get_subscription_status_use_case,
    get_usage_info_use_case,
    require_active_subscription,
    require_workspace_member,
)
from voicetask.api.errors import to_http_exception
from voicetask.api.routers.plans import to_plan_limits_response, to_plan_response
from voicetask.api.schemas.workspaces import (
    CancelSubscriptionResponse,
    ChangePlanRequest,
    ChangePlanResponse,
    CreateWorkspaceRequest,
    LimitCheckResponse,
    PaymentResponse,
    SubscriptionStatusResponse,
    UsageResponse,
    WorkspaceLimitsResponse,
    WorkspaceResponse,
)
from voicetask.application.dto.billing import ChangePlanInput, CreateWorkspaceInput
from voicetask.application.dto.subscriptions import EnforcementResult
from voicetask.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from voicetask.application.use_cases.change_plan import ChangePlanUseCase
from voicetask.application.use_cases.create_workspace import CreateWorkspaceUseCase
from voicetask.application.use_cases.get_payment_history import GetPaymentHistoryUseCase
from voicetask.application.use_cases.get_usage_info import GetUsageInfoUseCase
from voicetask.application.use_cases.get_workspace_subscription_status import (
    GetWorkspaceSubscriptionStatusUseCase,
)
from voicetask.application.use_cases.plan_enforcement import PlanEnforcementUseCase
from voicetask.domain.exceptions import DomainError, PlanLimitError, PlanNotFoundError


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/v1/workspaces", response_model=WorkspaceResponse, status_code=201)
def create_workspace(
    req: CreateWorkspaceRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateWorkspaceUseCase = Depends(get_create_workspace_use_case),
):
    try:
        workspace = use_case.execute(CreateWorkspaceInput(user_id=user_id, name=req.name))
    except PlanLimitError as exc:
        raise to_http_exception(exc) from exc
    except PlanNotFoundError as exc:
        # The trial plan comes from seed data; its absence is a deployment problem.
        logger.error("Workspace created without a trial: %s", exc)
        raise HTTPException(status_code=500, detail="Trial plan is not configured.") from exc
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return WorkspaceResponse(
        id=workspace.id,
        name=workspace.name,
        slug=workspace.slug,
        owner_id=workspace.owner_id,
    )


@router.get("/v1/workspaces/{workspace_id}/subscription", response_model=SubscriptionStatusResponse)
def get_subscription_status(
    workspace_id: str,
    _user_id: str = Depends(require_workspace_member),
    use_case: GetWorkspaceSubscriptionStatusUseCase = Depends(get_subscription_status_use_case),
):
    output = use_case.execute(workspace_id=workspace_id)
    return SubscriptionStatusResponse(
        is_active=output.is_active,
        status=output.status,
        plan=to_plan_response(output.plan) if output.plan else None,
        trial_days_remaining=output.trial_days_remaining,
        is_trialing=output.is_trialing,
    )


@router.get("/v1/workspaces/{workspace_id}/usage", response_model=UsageResponse)
def get_usage(
    workspace_id: str,
    user_id: str = Depends(require_workspace_member),
    use_case: GetUsageInfoUseCase = Depends(get_usage_info_use_case),
):
    output = use_case.execute(workspace_id=workspace_id, user_id=user_id)
    return UsageResponse(
        current_users=output.current_users,
        current_projects=output.current_projects,
        current_workspaces=output.current_workspaces,
        limits=to_plan_limits_response(output.limits),
    )


@router.get("/v1/workspaces/{workspace_id}/limits", response_model=WorkspaceLimitsResponse)
def get_limits(
    workspace_id: str,
    user_id: str = Depends(require_workspace_member),
    enforcement: PlanEnforcementUseCase = Depends(get_plan_enforcement_use_case),
):
    return WorkspaceLimitsResponse(
        members=_limit_check(enforcement.can_add_member(workspace_id=workspace_id)),
        projects=_limit_check(enforcement.can_add_project(workspace_id=workspace_id)),
        workspaces=_limit_check(enforcement.can_create_workspace(user_id=user_id)),
    )


@router.get("/v1/workspaces/{workspace_id}/payments", response_model=list[PaymentResponse])
def list_payments(
    workspace_id: str,
    _user_id: str = Depends(require_workspace_member),
    use_case: GetPaymentHistoryUseCase = Depends(get_payment_history_use_case),
):
    return [
        PaymentResponse(
            id=record.id,
            amount=record.amount,
            currency=record.currency,
            provider=record.provider,
            provider_payment_id=record.provider_payment_id,
            status=record.status,
            description=record.description,
            created_at=record.created_at,
        )
        for record in use_case.execute(workspace_id=workspace_id)
    ]


@router.post(
    "/v1/workspaces/{workspace_id}/subscription/change-plan",
    response_model=ChangePlanResponse,
)
def change_plan(
    workspace_id: str,
    req: ChangePlanRequest,
    _user_id: str = Depends(require_active_subscription),
    use_case: ChangePlanUseCase = Depends(get_change_plan_use_case),
):
    try:
        output = use_case.execute(ChangePlanInput(workspace_id=workspace_id, new_plan_slug=req.plan_slug))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return ChangePlanResponse(success=output.success, new_plan=output.new_plan)


@router.post(
    "/v1/workspaces/{workspace_id}/subscription/cancel",
    response_model=CancelSubscriptionResponse,
)
def cancel_subscription(
    workspace_id: str,
    _user_id: str = Depends(require_workspace_member),
    use_case: CancelSubscriptionUseCase = Depends(get_cancel_subscription_use_case),
):
    try:
        use_case.execute(workspace_id=workspace_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CancelSubscriptionResponse(success=True)


def _limit_check(result: EnforcementResult) -> LimitCheckResponse:
    return LimitCheckResponse(
        allowed=result.allowed,
        reason=result.reason,
        current_usage=result.current_usage,
        limit=result.limit,
    )
