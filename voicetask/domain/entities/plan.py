from __future__ import annotations

from dataclasses import dataclass, field

UNLIMITED = -1


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    slug: str
    price_inr: int
    price_usd: int
    max_users: int
    max_projects: int
    max_workspaces: int
    max_storage_mb: int
    features: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True
    razorpay_plan_id: str | None = None
    stripe_price_id: str | None = None


@dataclass(frozen=True)
class PlanLimits:
    max_users: int
    max_projects: int
    max_workspaces: int
    max_storage_mb: int
    features: tuple[str, ...]


DEFAULT_PLAN_LIMITS = PlanLimits(
    max_users=1,
    max_projects=3,
    max_workspaces=1,
    max_storage_mb=100,
    features=(),
)
