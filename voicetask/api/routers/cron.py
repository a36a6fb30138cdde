from __future__ import annotations

from fastapi import APIRouter, Depends

from voicetask.api.deps import (
    get_send_trial_expiry_reminders_use_case,
    get_sync_provider_plans_use_case,
    require_cron_secret,
)
from voicetask.api.errors import to_http_exception
from voicetask.api.schemas.billing import SyncProviderPlansResponse, TrialExpiryResponse
from voicetask.application.use_cases.send_trial_expiry_reminders import (
    SendTrialExpiryRemindersUseCase,
)
from voicetask.application.use_cases.sync_provider_plans import SyncProviderPlansUseCase
from voicetask.domain.exceptions import DomainError


router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/v1/cron/trial-expiry", response_model=TrialExpiryResponse)
def trial_expiry(
    use_case: SendTrialExpiryRemindersUseCase = Depends(get_send_trial_expiry_reminders_use_case),
):
    output = use_case.execute()
    return TrialExpiryResponse(
        status="ok",
        processed=output.processed,
        emails_sent=output.emails_sent,
        expired=output.expired,
    )


@router.post("/v1/cron/sync-provider-plans", response_model=SyncProviderPlansResponse)
def sync_provider_plans(
    use_case: SyncProviderPlansUseCase = Depends(get_sync_provider_plans_use_case),
):
    try:
        output = use_case.execute()
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return SyncProviderPlansResponse(status="ok", created=output.created)
