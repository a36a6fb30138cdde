from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse

from voicetask.api.deps import (
    get_razorpay_webhook_use_case_factory,
    get_stripe_webhook_use_case_factory,
)
from voicetask.application.dto.webhooks import WebhookInput
from voicetask.application.use_cases.process_razorpay_webhook import ProcessRazorpayWebhookUseCase
from voicetask.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from voicetask.domain.exceptions import WebhookConfigurationError, WebhookSignatureError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhook/razorpay")
async def razorpay_webhook(
    request: Request,
    signature: str | None = Header(None, alias="x-razorpay-signature"),
    build_use_case: Callable[[], ProcessRazorpayWebhookUseCase] = Depends(get_razorpay_webhook_use_case_factory),
):
    payload = await request.body()
    return _handle_webhook("razorpay", build_use_case, signature=signature, payload=payload)


@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    signature: str | None = Header(None, alias="stripe-signature"),
    build_use_case: Callable[[], ProcessStripeWebhookUseCase] = Depends(get_stripe_webhook_use_case_factory),
):
    payload = await request.body()
    return _handle_webhook("stripe", build_use_case, signature=signature, payload=payload)


def _handle_webhook(provider: str, build_use_case, *, signature: str | None, payload: bytes) -> JSONResponse:
    if not signature:
        return _error(400, "Missing signature header")

    try:
        use_case = build_use_case()
        output = use_case.execute(WebhookInput(signature=signature, payload=payload))
    except WebhookConfigurationError as exc:
        logger.error("%s webhook rejected: %s", provider, exc)
        return _error(500, "Webhook secret not configured")
    except WebhookSignatureError as exc:
        logger.warning("%s webhook rejected: %s", provider, exc)
        return _error(400, "Invalid signature")
    except Exception:
        logger.exception("%s webhook processing failed", provider)
        return _error(500, "Internal server error")

    logger.info("%s webhook event=%s handled=%s", provider, output.event_type, output.handled)
    return JSONResponse(status_code=200, content={"status": "ok"})


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})
