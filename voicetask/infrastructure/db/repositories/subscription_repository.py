from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import text

from voicetask.application.dto.subscriptions import TrialReminderTarget
from voicetask.application.ports.payment_port import PaymentPort
from voicetask.application.ports.subscription_port import SubscriptionPort
from voicetask.domain.entities.subscription import SubscriptionWithPlan
from voicetask.infrastructure.db.mappers.billing_mapper import (
    map_row_to_payment_record,
    map_row_to_plan,
    map_row_to_subscription,
)

_SUBSCRIPTION_COLUMNS = """
    s.id,
    s.workspace_id,
    s.plan_id,
    s.status,
    s.trial_start,
    s.trial_end,
    s.current_period_start,
    s.current_period_end,
    s.payment_provider,
    s.provider_subscription_id,
    s.cancel_at_period_end,
    s.created_at,
    s.updated_at
"""

_PLAN_COLUMNS = """
    p.id AS p_id,
    p.name AS p_name,
    p.slug AS p_slug,
    p.price_inr AS p_price_inr,
    p.price_usd AS p_price_usd,
    p.max_users AS p_max_users,
    p.max_projects AS p_max_projects,
    p.max_workspaces AS p_max_workspaces,
    p.max_storage_mb AS p_max_storage_mb,
    p.features AS p_features,
    p.is_active AS p_is_active,
    p.razorpay_plan_id AS p_razorpay_plan_id,
    p.stripe_price_id AS p_stripe_price_id
"""

# Columns the webhook reconcilers may set by provider subscription id.
_PROVIDER_UPDATABLE = ("status", "current_period_start", "current_period_end", "cancel_at_period_end")


class SqlSubscriptionRepository(SubscriptionPort, PaymentPort):
    def __init__(self, engine):
        self._engine = engine

    def get_latest_subscription(self, *, workspace_id: str):
        sql = f"""
            SELECT {_SUBSCRIPTION_COLUMNS}, {_PLAN_COLUMNS}
            FROM public.subscriptions s
            JOIN public.plans p
              ON p.id = s.plan_id
            WHERE s.workspace_id = :workspace_id
            ORDER BY s.created_at DESC
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"workspace_id": workspace_id}).mappings().first()
        if row is None:
            return None
        return SubscriptionWithPlan(
            subscription=map_row_to_subscription(row),
            plan=map_row_to_plan(row, prefix="p_"),
        )

    def get_subscription_by_provider_id(self, *, provider_subscription_id: str):
        sql = f"""
            SELECT {_SUBSCRIPTION_COLUMNS}
            FROM public.subscriptions s
            WHERE s.provider_subscription_id = :provider_subscription_id
            ORDER BY s.created_at DESC
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(
                text(sql),
                {"provider_subscription_id": provider_subscription_id},
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_subscription(row)

    def create_subscription(
        self,
        *,
        workspace_id: str,
        plan_id: str,
        status: str,
        trial_start: datetime | None,
        trial_end: datetime | None,
        now: datetime,
    ):
        sql = """
            INSERT INTO public.subscriptions (
                id, workspace_id, plan_id, status, trial_start, trial_end,
                cancel_at_period_end, created_at, updated_at
            ) VALUES (
                :id, :workspace_id, :plan_id, :status, :trial_start, :trial_end,
                false, :created_at, :updated_at
            )
            RETURNING id, workspace_id, plan_id, status, trial_start, trial_end,
                      current_period_start, current_period_end, payment_provider,
                      provider_subscription_id, cancel_at_period_end, created_at, updated_at
        """
        params = {
            "id": str(uuid4()),
            "workspace_id": workspace_id,
            "plan_id": plan_id,
            "status": status,
            "trial_start": trial_start,
            "trial_end": trial_end,
            "created_at": now,
            "updated_at": now,
        }
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_subscription(row)

    def update_status(self, *, subscription_id: str, status: str, now: datetime) -> None:
        sql = """
            UPDATE public.subscriptions
            SET status = :status,
                updated_at = :now
            WHERE id = :subscription_id
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"subscription_id": subscription_id, "status": status, "now": now})

    def update_plan(self, *, subscription_id: str, plan_id: str, now: datetime) -> None:
        sql = """
            UPDATE public.subscriptions
            SET plan_id = :plan_id,
                updated_at = :now
            WHERE id = :subscription_id
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"subscription_id": subscription_id, "plan_id": plan_id, "now": now})

    def set_cancel_at_period_end(self, *, subscription_id: str, now: datetime) -> None:
        sql = """
            UPDATE public.subscriptions
            SET cancel_at_period_end = true,
                updated_at = :now
            WHERE id = :subscription_id
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"subscription_id": subscription_id, "now": now})

    def link_provider_subscription(
        self,
        *,
        subscription_id: str,
        provider: str,
        provider_subscription_id: str,
        plan_id: str | None,
        status: str | None,
        now: datetime,
    ) -> None:
        sql = """
            UPDATE public.subscriptions
            SET payment_provider = :provider,
                provider_subscription_id = :provider_subscription_id,
                plan_id = COALESCE(:plan_id, plan_id),
                status = COALESCE(:status, status),
                updated_at = :now
            WHERE id = :subscription_id
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {
                    "subscription_id": subscription_id,
                    "provider": provider,
                    "provider_subscription_id": provider_subscription_id,
                    "plan_id": plan_id,
                    "status": status,
                    "now": now,
                },
            )

    def update_by_provider_subscription_id(
        self,
        *,
        provider_subscription_id: str,
        now: datetime,
        status: str | None = None,
        current_period_start: datetime | None = None,
        current_period_end: datetime | None = None,
        cancel_at_period_end: bool | None = None,
    ) -> int:
        values = {
            "status": status,
            "current_period_start": current_period_start,
            "current_period_end": current_period_end,
            "cancel_at_period_end": cancel_at_period_end,
        }
        params = {name: values[name] for name in _PROVIDER_UPDATABLE if values[name] is not None}
        assignments = [f"{name} = :{name}" for name in params]
        assignments.append("updated_at = :now")
        sql = f"""
            UPDATE public.subscriptions
            SET {", ".join(assignments)}
            WHERE provider_subscription_id = :provider_subscription_id
        """
        params.update({"provider_subscription_id": provider_subscription_id, "now": now})
        with self._engine.begin() as conn:
            result = conn.execute(text(sql), params)
        return int(result.rowcount or 0)

    def list_trialing_subscriptions(self):
        sql = f"""
            SELECT {_SUBSCRIPTION_COLUMNS},
                   w.name AS workspace_name,
                   u.email AS owner_email
            FROM public.subscriptions s
            JOIN public.workspaces w
              ON w.id = s.workspace_id
            LEFT JOIN public.users u
              ON u.id = w.owner_id
            WHERE s.status = 'trialing'
            ORDER BY s.trial_end
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql)).mappings().all()
        return [
            TrialReminderTarget(
                subscription=map_row_to_subscription(row),
                workspace_name=row.get("workspace_name"),
                owner_email=row.get("owner_email"),
            )
            for row in rows
        ]

    def record_payment(
        self,
        *,
        workspace_id: str,
        subscription_id: str,
        amount: int,
        currency: str,
        provider: str,
        provider_payment_id: str,
        status: str,
        description: str | None,
    ) -> bool:
        sql = """
            INSERT INTO public.payment_history (
                id, workspace_id, subscription_id, amount, currency, provider,
                provider_payment_id, status, description, created_at
            ) VALUES (
                :id, :workspace_id, :subscription_id, :amount, :currency, :provider,
                :provider_payment_id, :status, :description, now()
            )
            ON CONFLICT (provider, provider_payment_id) DO NOTHING
            RETURNING id
        """
        params = {
            "id": str(uuid4()),
            "workspace_id": workspace_id,
            "subscription_id": subscription_id,
            "amount": amount,
            "currency": currency,
            "provider": provider,
            "provider_payment_id": provider_payment_id,
            "status": status,
            "description": description,
        }
        with self._engine.begin() as conn:
            inserted = conn.execute(text(sql), params).first()
        return inserted is not None

    def list_payments(self, *, workspace_id: str, limit: int = 20):
        sql = """
            SELECT id, workspace_id, subscription_id, amount, currency, provider,
                   provider_payment_id, status, description, created_at
            FROM public.payment_history
            WHERE workspace_id = :workspace_id
            ORDER BY created_at DESC
            LIMIT :limit
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"workspace_id": workspace_id, "limit": limit}).mappings().all()
        return [map_row_to_payment_record(row) for row in rows]
