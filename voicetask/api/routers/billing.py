from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from voicetask.api.deps import (
    get_create_razorpay_subscription_use_case,
    get_create_stripe_checkout_use_case,
    get_current_user_id,
    get_workspace_port,
)
from voicetask.api.errors import to_http_exception
from voicetask.api.schemas.billing import (
    CreateRazorpaySubscriptionRequest,
    CreateRazorpaySubscriptionResponse,
    CreateStripeCheckoutRequest,
    CreateStripeCheckoutResponse,
)
from voicetask.application.dto.billing import (
    CreateRazorpaySubscriptionInput,
    CreateStripeCheckoutInput,
)
from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.application.use_cases.create_razorpay_subscription import (
    CreateRazorpaySubscriptionUseCase,
)
from voicetask.application.use_cases.create_stripe_checkout import CreateStripeCheckoutUseCase
from voicetask.domain.exceptions import DomainError
from voicetask.shared.config import get_settings


router = APIRouter()


@router.post("/v1/billing/razorpay/subscription", response_model=CreateRazorpaySubscriptionResponse)
def create_razorpay_subscription(
    req: CreateRazorpaySubscriptionRequest,
    user_id: str = Depends(get_current_user_id),
    workspace_port: WorkspacePort = Depends(get_workspace_port),
    use_case: CreateRazorpaySubscriptionUseCase = Depends(get_create_razorpay_subscription_use_case),
):
    _ensure_member(workspace_port, workspace_id=req.workspace_id, user_id=user_id)
    try:
        output = use_case.execute(
            CreateRazorpaySubscriptionInput(
                workspace_id=req.workspace_id,
                plan_slug=req.plan_slug,
                user_id=user_id,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CreateRazorpaySubscriptionResponse(
        subscription_id=output.subscription_id,
        short_url=output.short_url,
    )


@router.post("/v1/billing/stripe/checkout-session", response_model=CreateStripeCheckoutResponse)
def create_stripe_checkout_session(
    req: CreateStripeCheckoutRequest,
    user_id: str = Depends(get_current_user_id),
    workspace_port: WorkspacePort = Depends(get_workspace_port),
    use_case: CreateStripeCheckoutUseCase = Depends(get_create_stripe_checkout_use_case),
):
    _ensure_member(workspace_port, workspace_id=req.workspace_id, user_id=user_id)
    billing_url = get_settings().billing_url
    try:
        output = use_case.execute(
            CreateStripeCheckoutInput(
                workspace_id=req.workspace_id,
                plan_slug=req.plan_slug,
                user_id=user_id,
                success_url=f"{billing_url}?success=true&session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{billing_url}?canceled=true",
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CreateStripeCheckoutResponse(session_id=output.session_id, url=output.url)


def _ensure_member(workspace_port: WorkspacePort, *, workspace_id: str, user_id: str) -> None:
    if not workspace_port.is_member(workspace_id=workspace_id, user_id=user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this workspace.")
