from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    id: str
    name: str | None
    email: str


@dataclass(frozen=True)
class Workspace:
    id: str
    name: str
    slug: str
    owner_id: str
    stripe_customer_id: str | None
    created_at: datetime
