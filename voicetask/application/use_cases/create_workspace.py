from __future__ import annotations

import logging
import re
import secrets
import string

from voicetask.application.dto.billing import CreateWorkspaceInput
from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.domain.entities.workspace import Workspace
from voicetask.domain.exceptions import BillingError, PlanLimitError

from .common import Clock, utcnow
from .create_trial_subscription import CreateTrialSubscriptionUseCase
from .plan_enforcement import PlanEnforcementUseCase

logger = logging.getLogger(__name__)

_SLUG_ALPHABET = string.ascii_lowercase + string.digits


def generate_workspace_slug(name: str) -> str:
    base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    suffix = "".join(secrets.choice(_SLUG_ALPHABET) for _ in range(6))
    return f"{base}-{suffix}" if base else suffix


class CreateWorkspaceUseCase:
    def __init__(
        self,
        *,
        workspace_port: WorkspacePort,
        plan_enforcement: PlanEnforcementUseCase,
        create_trial_subscription: CreateTrialSubscriptionUseCase,
        clock: Clock = utcnow,
    ):
        self._workspace_port = workspace_port
        self._plan_enforcement = plan_enforcement
        self._create_trial_subscription = create_trial_subscription
        self._clock = clock

    def execute(self, command: CreateWorkspaceInput) -> Workspace:
        name = command.name.strip()
        if not name:
            raise BillingError("Workspace name is required.")

        check = self._plan_enforcement.can_create_workspace(user_id=command.user_id)
        if not check.allowed:
            raise PlanLimitError(check.reason or "Plan limit reached")

        now = self._clock()
        workspace = self._workspace_port.create_workspace(
            name=name,
            slug=generate_workspace_slug(name),
            owner_id=command.user_id,
            now=now,
        )
        self._workspace_port.add_member(workspace_id=workspace.id, user_id=command.user_id, role="owner", now=now)
        self._create_trial_subscription.execute(workspace_id=workspace.id)
        logger.info("Workspace %s created by user %s with trial subscription.", workspace.id, command.user_id)
        return workspace
