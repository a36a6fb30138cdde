from __future__ import annotations

from typing import Protocol

from voicetask.domain.entities.plan import Plan


class PlanCatalogPort(Protocol):
    def get_plan_by_slug(self, *, slug: str) -> Plan | None:
        ...

    def get_plan_by_id(self, *, plan_id: str) -> Plan | None:
        ...

    def list_active_plans(self, *, use_cache: bool = True) -> list[Plan]:
        ...

    def update_plan_provider_ids(
        self,
        *,
        plan_id: str,
        razorpay_plan_id: str | None = None,
        stripe_price_id: str | None = None,
    ) -> None:
        ...
