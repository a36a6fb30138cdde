from __future__ import annotations

from sqlalchemy import text

from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.infrastructure.cache import TtlCache
from voicetask.infrastructure.db.mappers.billing_mapper import map_row_to_plan

_ACTIVE_PLANS_KEY = "all-plans"

_PLAN_SELECT = """
    SELECT id, name, slug, price_inr, price_usd, max_users, max_projects, max_workspaces,
           max_storage_mb, features, is_active, razorpay_plan_id, stripe_price_id
    FROM public.plans
"""


class SqlPlanCatalogRepository(PlanCatalogPort):
    def __init__(self, engine, *, cache: TtlCache):
        self._engine = engine
        self._cache = cache

    def get_plan_by_slug(self, *, slug: str):
        sql = f"""
            {_PLAN_SELECT}
            WHERE slug = :slug
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"slug": slug}).mappings().first()
        if row is None:
            return None
        return map_row_to_plan(row)

    def get_plan_by_id(self, *, plan_id: str):
        sql = f"""
            {_PLAN_SELECT}
            WHERE id = :plan_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"plan_id": plan_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_plan(row)

    def list_active_plans(self, *, use_cache: bool = True):
        if not use_cache:
            return self._load_active_plans()
        return self._cache.get_or_load(_ACTIVE_PLANS_KEY, self._load_active_plans)

    def update_plan_provider_ids(
        self,
        *,
        plan_id: str,
        razorpay_plan_id: str | None = None,
        stripe_price_id: str | None = None,
    ) -> None:
        sql = """
            UPDATE public.plans
            SET razorpay_plan_id = COALESCE(:razorpay_plan_id, razorpay_plan_id),
                stripe_price_id = COALESCE(:stripe_price_id, stripe_price_id)
            WHERE id = :plan_id
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {
                    "plan_id": plan_id,
                    "razorpay_plan_id": razorpay_plan_id,
                    "stripe_price_id": stripe_price_id,
                },
            )
        self._cache.invalidate(_ACTIVE_PLANS_KEY)

    def _load_active_plans(self):
        sql = f"""
            {_PLAN_SELECT}
            WHERE is_active = true
            ORDER BY price_inr ASC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql)).mappings().all()
        return [map_row_to_plan(row) for row in rows]
