from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import text

from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.infrastructure.db.mappers.billing_mapper import map_row_to_user, map_row_to_workspace


class SqlWorkspaceRepository(WorkspacePort):
    def __init__(self, engine):
        self._engine = engine

    def get_user(self, *, user_id: str):
        sql = """
            SELECT id, name, email
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_workspace(self, *, workspace_id: str):
        sql = """
            SELECT id, name, slug, owner_id, stripe_customer_id, created_at
            FROM public.workspaces
            WHERE id = :workspace_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"workspace_id": workspace_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_workspace(row)

    def create_workspace(self, *, name: str, slug: str, owner_id: str, now: datetime):
        sql = """
            INSERT INTO public.workspaces (id, name, slug, owner_id, created_at)
            VALUES (:id, :name, :slug, :owner_id, :created_at)
            RETURNING id, name, slug, owner_id, stripe_customer_id, created_at
        """
        params = {
            "id": str(uuid4()),
            "name": name,
            "slug": slug,
            "owner_id": owner_id,
            "created_at": now,
        }
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_workspace(row)

    def add_member(self, *, workspace_id: str, user_id: str, role: str, now: datetime) -> None:
        sql = """
            INSERT INTO public.workspace_members (id, workspace_id, user_id, role, joined_at)
            VALUES (:id, :workspace_id, :user_id, :role, :joined_at)
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {
                    "id": str(uuid4()),
                    "workspace_id": workspace_id,
                    "user_id": user_id,
                    "role": role,
                    "joined_at": now,
                },
            )

    def is_member(self, *, workspace_id: str, user_id: str) -> bool:
        sql = """
            SELECT 1
            FROM public.workspace_members
            WHERE workspace_id = :workspace_id
              AND user_id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"workspace_id": workspace_id, "user_id": user_id}).first()
        return row is not None

    def list_user_workspace_ids(self, *, user_id: str) -> list[str]:
        sql = """
            SELECT workspace_id
            FROM public.workspace_members
            WHERE user_id = :user_id
            ORDER BY joined_at
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"user_id": user_id}).scalars().all()
        return [str(value) for value in rows]

    def count_members(self, *, workspace_id: str) -> int:
        sql = """
            SELECT count(*)
            FROM public.workspace_members
            WHERE workspace_id = :workspace_id
        """
        with self._engine.connect() as conn:
            return int(conn.execute(text(sql), {"workspace_id": workspace_id}).scalar_one())

    def count_projects(self, *, workspace_id: str) -> int:
        sql = """
            SELECT count(*)
            FROM public.projects
            WHERE workspace_id = :workspace_id
        """
        with self._engine.connect() as conn:
            return int(conn.execute(text(sql), {"workspace_id": workspace_id}).scalar_one())

    def update_stripe_customer_id(self, *, workspace_id: str, stripe_customer_id: str) -> None:
        sql = """
            UPDATE public.workspaces
            SET stripe_customer_id = :stripe_customer_id
            WHERE id = :workspace_id
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {
                    "workspace_id": workspace_id,
                    "stripe_customer_id": stripe_customer_id,
                },
            )
