from __future__ import annotations

import json
from typing import Any, Mapping

from voicetask.domain.entities.payment import PaymentRecord
from voicetask.domain.entities.plan import Plan
from voicetask.domain.entities.subscription import Subscription
from voicetask.domain.entities.workspace import User, Workspace


def _as_str(value: Any) -> str:
    return str(value)


def _as_str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


def _features(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = json.loads(value)
    return tuple(str(item) for item in value)


def map_row_to_plan(row: Mapping[str, Any], *, prefix: str = "") -> Plan:
    return Plan(
        id=_as_str(row[f"{prefix}id"]),
        name=row[f"{prefix}name"],
        slug=row[f"{prefix}slug"],
        price_inr=int(row[f"{prefix}price_inr"]),
        price_usd=int(row[f"{prefix}price_usd"]),
        max_users=int(row[f"{prefix}max_users"]),
        max_projects=int(row[f"{prefix}max_projects"]),
        max_workspaces=int(row[f"{prefix}max_workspaces"]),
        max_storage_mb=int(row[f"{prefix}max_storage_mb"]),
        features=_features(row.get(f"{prefix}features")),
        is_active=bool(row[f"{prefix}is_active"]),
        razorpay_plan_id=row.get(f"{prefix}razorpay_plan_id"),
        stripe_price_id=row.get(f"{prefix}stripe_price_id"),
    )


def map_row_to_subscription(row: Mapping[str, Any]) -> Subscription:
    return Subscription(
        id=_as_str(row["id"]),
        workspace_id=_as_str(row["workspace_id"]),
        plan_id=_as_str(row["plan_id"]),
        status=row["status"],
        trial_start=row.get("trial_start"),
        trial_end=row.get("trial_end"),
        current_period_start=row.get("current_period_start"),
        current_period_end=row.get("current_period_end"),
        payment_provider=row.get("payment_provider"),
        provider_subscription_id=row.get("provider_subscription_id"),
        cancel_at_period_end=bool(row["cancel_at_period_end"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_payment_record(row: Mapping[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        id=_as_str(row["id"]),
        workspace_id=_as_str(row["workspace_id"]),
        subscription_id=_as_str(row["subscription_id"]),
        amount=int(row["amount"]),
        currency=row["currency"],
        provider=row["provider"],
        provider_payment_id=row["provider_payment_id"],
        status=row["status"],
        description=row.get("description"),
        created_at=row["created_at"],
    )


def map_row_to_workspace(row: Mapping[str, Any]) -> Workspace:
    return Workspace(
        id=_as_str(row["id"]),
        name=row["name"],
        slug=row["slug"],
        owner_id=_as_str(row["owner_id"]),
        stripe_customer_id=row.get("stripe_customer_id"),
        created_at=row["created_at"],
    )


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        name=row.get("name"),
        email=row["email"],
    )
