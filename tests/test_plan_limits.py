from __future__ import annotations

from fakes import make_plan
from voicetask.domain.entities.plan import UNLIMITED
from voicetask.domain.services.plan_limits import get_plan_limits, is_unlimited, within_limit


def test_get_plan_limits_passes_unlimited_sentinel_through():
    plan = make_plan(max_projects=UNLIMITED, max_workspaces=UNLIMITED)

    limits = get_plan_limits(plan)

    assert limits.max_users == 5
    assert limits.max_projects == -1
    assert limits.max_workspaces == -1
    assert limits.features == ("voice_capture", "timesheets")


def test_within_limit_boundaries():
    assert within_limit(current=4, limit=5) is True
    assert within_limit(current=5, limit=5) is False
    assert within_limit(current=10_000, limit=UNLIMITED) is True
    assert is_unlimited(-1) is True
    assert is_unlimited(0) is False
