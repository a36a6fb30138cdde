from __future__ import annotations

import logging

from fastapi import HTTPException

from voicetask.domain.exceptions import (
    BillingError,
    DomainError,
    PlanLimitError,
    PlanNotFoundError,
    ProviderRequestError,
    SubscriptionInactiveError,
    SubscriptionNotFoundError,
    WorkspaceNotFoundError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: DomainError) -> HTTPException:
    if isinstance(exc, (PlanLimitError, SubscriptionInactiveError)):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, (PlanNotFoundError, SubscriptionNotFoundError, WorkspaceNotFoundError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ProviderRequestError):
        logger.warning("Payment provider request failed: %s", exc)
        return HTTPException(status_code=502, detail="Payment provider request failed.")
    if isinstance(exc, BillingError):
        return HTTPException(status_code=400, detail=str(exc))
    logger.error("Unhandled domain error: %s", exc)
    return HTTPException(status_code=500, detail="Internal server error")
