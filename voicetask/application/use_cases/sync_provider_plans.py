from __future__ import annotations

import logging

from voicetask.application.dto.billing import SyncProviderPlansOutput
from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.application.ports.razorpay_port import RazorpayPort

logger = logging.getLogger(__name__)

PAISE_PER_RUPEE = 100


class SyncProviderPlansUseCase:
    """Creates Razorpay plans for catalog entries that are not linked yet."""

    def __init__(self, *, plan_catalog_port: PlanCatalogPort, razorpay_port: RazorpayPort):
        self._plan_catalog_port = plan_catalog_port
        self._razorpay_port = razorpay_port

    def execute(self) -> SyncProviderPlansOutput:
        created: dict[str, str] = {}
        # Other workers may have linked plans since this process cached the list.
        for plan in self._plan_catalog_port.list_active_plans(use_cache=False):
            if plan.razorpay_plan_id:
                continue
            razorpay_plan_id = self._razorpay_port.create_plan(
                name=plan.name,
                amount=plan.price_inr * PAISE_PER_RUPEE,
                currency="INR",
                period="monthly",
                interval=1,
            )
            self._plan_catalog_port.update_plan_provider_ids(plan_id=plan.id, razorpay_plan_id=razorpay_plan_id)
            logger.info("Created Razorpay plan %s for %s.", razorpay_plan_id, plan.slug)
            created[plan.slug] = razorpay_plan_id
        return SyncProviderPlansOutput(created=created)
