from __future__ import annotations

from pydantic import BaseModel


class PlanResponse(BaseModel):
    id: str
    name: str
    slug: str
    price_inr: int
    price_usd: int
    max_users: int
    max_projects: int
    max_workspaces: int
    max_storage_mb: int
    features: list[str]


class PlanLimitsResponse(BaseModel):
    max_users: int
    max_projects: int
    max_workspaces: int
    max_storage_mb: int
    features: list[str]
