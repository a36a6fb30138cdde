from __future__ import annotations

from datetime import datetime
from typing import Protocol

from voicetask.domain.entities.workspace import User, Workspace


class WorkspacePort(Protocol):
    def get_user(self, *, user_id: str) -> User | None:
        ...

    def get_workspace(self, *, workspace_id: str) -> Workspace | None:
        ...

    def create_workspace(self, *, name: str, slug: str, owner_id: str, now: datetime) -> Workspace:
        ...

    def add_member(self, *, workspace_id: str, user_id: str, role: str, now: datetime) -> None:
        ...

    def is_member(self, *, workspace_id: str, user_id: str) -> bool:
        ...

    def list_user_workspace_ids(self, *, user_id: str) -> list[str]:
        ...

    def count_members(self, *, workspace_id: str) -> int:
        ...

    def count_projects(self, *, workspace_id: str) -> int:
        ...

    def update_stripe_customer_id(self, *, workspace_id: str, stripe_customer_id: str) -> None:
        ...
