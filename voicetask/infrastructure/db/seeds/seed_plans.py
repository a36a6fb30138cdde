from __future__ import annotations

import json
import logging
from uuid import uuid4

from sqlalchemy import text

logger = logging.getLogger(__name__)

DEFAULT_PLANS = (
    {
        "name": "Solo",
        "slug": "solo",
        "price_inr": 499,
        "price_usd": 9,
        "max_users": 1,
        "max_projects": 3,
        "max_workspaces": 1,
        "features": ["voice_capture", "timesheet", "dashboard", "export_csv"],
    },
    {
        "name": "Team",
        "slug": "team",
        "price_inr": 999,
        "price_usd": 19,
        "max_users": 5,
        "max_projects": 10,
        "max_workspaces": 3,
        "features": [
            "voice_capture",
            "timesheet",
            "dashboard",
            "export_csv",
            "export_pdf",
            "comments",
            "notifications",
        ],
    },
    {
        "name": "Agency",
        "slug": "agency",
        "price_inr": 1999,
        "price_usd": 35,
        "max_users": 15,
        "max_projects": -1,
        "max_workspaces": -1,
        "features": [
            "voice_capture",
            "timesheet",
            "dashboard",
            "export_csv",
            "export_pdf",
            "comments",
            "notifications",
            "file_attachments",
            "recurring_tasks",
            "priority_support",
        ],
    },
)


def seed_plans(engine) -> list[str]:
    """Inserts the default plans; existing slugs are left untouched."""
    created: list[str] = []
    with engine.begin() as conn:
        for plan in DEFAULT_PLANS:
            row = conn.execute(
                text(
                    """
                    INSERT INTO public.plans (
                        id, name, slug, price_inr, price_usd, max_users, max_projects,
                        max_workspaces, features, is_active
                    ) VALUES (
                        :id, :name, :slug, :price_inr, :price_usd, :max_users, :max_projects,
                        :max_workspaces, CAST(:features AS jsonb), true
                    )
                    ON CONFLICT (slug) DO NOTHING
                    RETURNING slug
                    """
                ),
                {**plan, "id": str(uuid4()), "features": json.dumps(plan["features"])},
            ).first()
            if row is None:
                logger.info("Plan %s already exists, skipping.", plan["slug"])
                continue
            logger.info("Created plan %s.", plan["slug"])
            created.append(plan["slug"])
    return created


def main() -> None:
    from voicetask.infrastructure.db.engine import create_schema, get_engine
    from voicetask.shared.config import get_settings

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    if not settings.postgres_dsn:
        raise SystemExit("POSTGRES_DSN is required.")
    engine = get_engine(settings.postgres_dsn)
    create_schema(engine)
    seed_plans(engine)


if __name__ == "__main__":
    main()
