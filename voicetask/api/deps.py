from __future__ import annotations

import hmac
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Header, HTTPException

from voicetask.api.errors import to_http_exception
from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from voicetask.application.use_cases.change_plan import ChangePlanUseCase
from voicetask.application.use_cases.create_razorpay_subscription import (
    CreateRazorpaySubscriptionUseCase,
)
from voicetask.application.use_cases.create_stripe_checkout import CreateStripeCheckoutUseCase
from voicetask.application.use_cases.create_trial_subscription import CreateTrialSubscriptionUseCase
from voicetask.application.use_cases.create_workspace import CreateWorkspaceUseCase
from voicetask.application.use_cases.get_payment_history import GetPaymentHistoryUseCase
from voicetask.application.use_cases.get_usage_info import GetUsageInfoUseCase
from voicetask.application.use_cases.get_workspace_subscription_status import (
    GetWorkspaceSubscriptionStatusUseCase,
)
from voicetask.application.use_cases.list_plans import ListPlansUseCase
from voicetask.application.use_cases.plan_enforcement import PlanEnforcementUseCase
from voicetask.application.use_cases.process_razorpay_webhook import ProcessRazorpayWebhookUseCase
from voicetask.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from voicetask.application.use_cases.send_trial_expiry_reminders import (
    SendTrialExpiryRemindersUseCase,
)
from voicetask.application.use_cases.sync_provider_plans import SyncProviderPlansUseCase
from voicetask.domain.exceptions import DomainError
from voicetask.infrastructure.cache import TtlCache
from voicetask.infrastructure.clients.razorpay_client import RazorpayClient, RazorpayWebhookVerifier
from voicetask.infrastructure.clients.stripe_client import StripeClient, StripeWebhookVerifier
from voicetask.infrastructure.db.engine import get_engine
from voicetask.infrastructure.db.repositories.plan_catalog_repository import SqlPlanCatalogRepository
from voicetask.infrastructure.db.repositories.subscription_repository import SqlSubscriptionRepository
from voicetask.infrastructure.db.repositories.workspace_repository import SqlWorkspaceRepository
from voicetask.infrastructure.notifications.mail_notifier import MailTrialNotifier
from voicetask.infrastructure.security.token_service import JwtTokenService
from voicetask.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


@lru_cache(maxsize=1)
def _get_plan_cache() -> TtlCache:
    return TtlCache(get_settings().plan_cache_ttl_seconds)


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    settings = get_settings()
    if not settings.jwt_secret:
        raise HTTPException(status_code=500, detail="JWT_SECRET is required.")
    return JwtTokenService(jwt_secret=settings.jwt_secret)


@lru_cache(maxsize=1)
def _get_stripe_client() -> StripeClient:
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY is required.")
    return StripeClient(secret_key=settings.stripe_secret_key)


@lru_cache(maxsize=1)
def _get_razorpay_client() -> RazorpayClient:
    settings = get_settings()
    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        raise HTTPException(
            status_code=500,
            detail="RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required.",
        )
    return RazorpayClient(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        api_base=settings.razorpay_api_base,
        timeout_seconds=settings.razorpay_timeout_seconds,
    )


def _get_subscription_repository() -> SqlSubscriptionRepository:
    return SqlSubscriptionRepository(_get_db_engine())


def _get_plan_catalog_repository() -> SqlPlanCatalogRepository:
    return SqlPlanCatalogRepository(_get_db_engine(), cache=_get_plan_cache())


def get_workspace_port() -> WorkspacePort:
    return SqlWorkspaceRepository(_get_db_engine())


def get_subscription_status_use_case() -> GetWorkspaceSubscriptionStatusUseCase:
    return GetWorkspaceSubscriptionStatusUseCase(subscription_port=_get_subscription_repository())


def get_plan_enforcement_use_case() -> PlanEnforcementUseCase:
    return PlanEnforcementUseCase(
        subscription_port=_get_subscription_repository(),
        workspace_port=get_workspace_port(),
    )


def get_usage_info_use_case() -> GetUsageInfoUseCase:
    return GetUsageInfoUseCase(
        subscription_port=_get_subscription_repository(),
        workspace_port=get_workspace_port(),
    )


def get_payment_history_use_case() -> GetPaymentHistoryUseCase:
    return GetPaymentHistoryUseCase(payment_port=_get_subscription_repository())


def get_list_plans_use_case() -> ListPlansUseCase:
    return ListPlansUseCase(plan_catalog_port=_get_plan_catalog_repository())


def get_create_workspace_use_case() -> CreateWorkspaceUseCase:
    settings = get_settings()
    subscriptions = _get_subscription_repository()
    workspaces = get_workspace_port()
    return CreateWorkspaceUseCase(
        workspace_port=workspaces,
        plan_enforcement=PlanEnforcementUseCase(
            subscription_port=subscriptions,
            workspace_port=workspaces,
        ),
        create_trial_subscription=CreateTrialSubscriptionUseCase(
            plan_catalog_port=_get_plan_catalog_repository(),
            subscription_port=subscriptions,
            trial_plan_slug=settings.trial_plan_slug,
        ),
    )


def get_change_plan_use_case() -> ChangePlanUseCase:
    return ChangePlanUseCase(
        subscription_port=_get_subscription_repository(),
        plan_catalog_port=_get_plan_catalog_repository(),
        razorpay_port=_get_razorpay_client(),
        stripe_port=_get_stripe_client(),
    )


def get_cancel_subscription_use_case() -> CancelSubscriptionUseCase:
    return CancelSubscriptionUseCase(
        subscription_port=_get_subscription_repository(),
        razorpay_port=_get_razorpay_client(),
        stripe_port=_get_stripe_client(),
    )


def get_create_razorpay_subscription_use_case() -> CreateRazorpaySubscriptionUseCase:
    return CreateRazorpaySubscriptionUseCase(
        subscription_port=_get_subscription_repository(),
        plan_catalog_port=_get_plan_catalog_repository(),
        razorpay_port=_get_razorpay_client(),
    )


def get_create_stripe_checkout_use_case() -> CreateStripeCheckoutUseCase:
    return CreateStripeCheckoutUseCase(
        workspace_port=get_workspace_port(),
        plan_catalog_port=_get_plan_catalog_repository(),
        stripe_port=_get_stripe_client(),
    )


def build_process_razorpay_webhook_use_case() -> ProcessRazorpayWebhookUseCase:
    repository = _get_subscription_repository()
    return ProcessRazorpayWebhookUseCase(
        subscription_port=repository,
        payment_port=repository,
        razorpay_webhook_port=RazorpayWebhookVerifier(),
        webhook_secret=get_settings().razorpay_webhook_secret,
    )


def build_process_stripe_webhook_use_case() -> ProcessStripeWebhookUseCase:
    repository = _get_subscription_repository()
    return ProcessStripeWebhookUseCase(
        subscription_port=repository,
        payment_port=repository,
        plan_catalog_port=_get_plan_catalog_repository(),
        stripe_webhook_port=StripeWebhookVerifier(),
        webhook_secret=get_settings().stripe_webhook_secret,
    )


# Webhook routes build their use case inside the handler so configuration
# failures still answer with the webhook error envelope.
def get_razorpay_webhook_use_case_factory() -> Callable[[], ProcessRazorpayWebhookUseCase]:
    return build_process_razorpay_webhook_use_case


def get_stripe_webhook_use_case_factory() -> Callable[[], ProcessStripeWebhookUseCase]:
    return build_process_stripe_webhook_use_case


def get_send_trial_expiry_reminders_use_case() -> SendTrialExpiryRemindersUseCase:
    settings = get_settings()
    return SendTrialExpiryRemindersUseCase(
        subscription_port=_get_subscription_repository(),
        notification_port=MailTrialNotifier(settings=settings),
        billing_url=settings.billing_url,
    )


def get_sync_provider_plans_use_case() -> SyncProviderPlansUseCase:
    return SyncProviderPlansUseCase(
        plan_catalog_port=_get_plan_catalog_repository(),
        razorpay_port=_get_razorpay_client(),
    )


def get_current_user_id(
    authorization: str | None = Header(None),
    workspace_port: WorkspacePort = Depends(get_workspace_port),
) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header.")
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")

    try:
        user_id = _get_token_service().decode_access_token(token=token)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    if workspace_port.get_user(user_id=user_id) is None:
        raise HTTPException(status_code=401, detail="User not found.")
    return user_id


def require_workspace_member(
    workspace_id: str,
    user_id: str = Depends(get_current_user_id),
    workspace_port: WorkspacePort = Depends(get_workspace_port),
) -> str:
    if not workspace_port.is_member(workspace_id=workspace_id, user_id=user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this workspace.")
    return user_id


def require_active_subscription(
    workspace_id: str,
    user_id: str = Depends(require_workspace_member),
    enforcement: PlanEnforcementUseCase = Depends(get_plan_enforcement_use_case),
) -> str:
    try:
        enforcement.require_active_subscription(workspace_id=workspace_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return user_id


def require_cron_secret(x_cron_secret: str | None = Header(None, alias="x-cron-secret")) -> None:
    expected = get_settings().cron_secret
    if not expected or not x_cron_secret:
        raise HTTPException(status_code=401, detail="Unauthorized")
    # Header values arrive latin-1 decoded; compare_digest only takes ASCII str.
    if not hmac.compare_digest(x_cron_secret.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Unauthorized")
