from __future__ import annotations

from voicetask.application.dto.billing import CreateStripeCheckoutInput, CreateStripeCheckoutOutput
from voicetask.application.ports.plan_catalog_port import PlanCatalogPort
from voicetask.application.ports.stripe_port import StripePort
from voicetask.application.ports.workspace_port import WorkspacePort
from voicetask.domain.exceptions import BillingError, PlanNotFoundError, WorkspaceNotFoundError


class CreateStripeCheckoutUseCase:
    def __init__(
        self,
        *,
        workspace_port: WorkspacePort,
        plan_catalog_port: PlanCatalogPort,
        stripe_port: StripePort,
    ):
        self._workspace_port = workspace_port
        self._plan_catalog_port = plan_catalog_port
        self._stripe_port = stripe_port

    def execute(self, command: CreateStripeCheckoutInput) -> CreateStripeCheckoutOutput:
        plan = self._plan_catalog_port.get_plan_by_slug(slug=command.plan_slug)
        if plan is None or not plan.stripe_price_id:
            raise PlanNotFoundError("Plan not found or Stripe price not configured")

        workspace = self._workspace_port.get_workspace(workspace_id=command.workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError("Workspace not found.")

        customer_id = workspace.stripe_customer_id
        if not customer_id:
            user = self._workspace_port.get_user(user_id=command.user_id)
            if user is None:
                raise BillingError("User not found.")
            customer_id = self._stripe_port.create_customer(email=user.email, name=user.name)
            self._workspace_port.update_stripe_customer_id(
                workspace_id=workspace.id,
                stripe_customer_id=customer_id,
            )

        result = self._stripe_port.create_checkout_session(
            workspace_id=workspace.id,
            plan_slug=plan.slug,
            price_id=plan.stripe_price_id,
            success_url=command.success_url,
            cancel_url=command.cancel_url,
            customer_id=customer_id,
        )
        return CreateStripeCheckoutOutput(session_id=result.id, url=result.url)
