from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count

from voicetask.application.dto.billing import RazorpaySubscriptionResult, StripeCheckoutSessionResult
from voicetask.application.dto.subscriptions import TrialReminderTarget
from voicetask.domain.entities.payment import PaymentRecord
from voicetask.domain.entities.plan import Plan
from voicetask.domain.entities.subscription import Subscription, SubscriptionWithPlan
from voicetask.domain.entities.workspace import User, Workspace


NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


def fixed_clock(moment: datetime = NOW):
    return lambda: moment


def make_plan(**overrides) -> Plan:
    values = dict(
        id="plan-team",
        name="Team",
        slug="team",
        price_inr=999,
        price_usd=19,
        max_users=5,
        max_projects=10,
        max_workspaces=3,
        max_storage_mb=5000,
        features=("voice_capture", "timesheets"),
        is_active=True,
        razorpay_plan_id="plan_rzp_team",
        stripe_price_id="price_team",
    )
    values.update(overrides)
    return Plan(**values)


def make_subscription(**overrides) -> Subscription:
    values = dict(
        id="sub-1",
        workspace_id="ws-1",
        plan_id="plan-team",
        status="active",
        trial_start=None,
        trial_end=None,
        current_period_start=None,
        current_period_end=None,
        payment_provider=None,
        provider_subscription_id=None,
        cancel_at_period_end=False,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return Subscription(**values)


class FakePlanCatalog:
    def __init__(self, plans: list[Plan] | None = None):
        self.plans: dict[str, Plan] = {plan.id: plan for plan in (plans or [])}
        self.cached_reads = 0

    def get_plan_by_slug(self, *, slug: str) -> Plan | None:
        for plan in self.plans.values():
            if plan.slug == slug and plan.is_active:
                return plan
        return None

    def get_plan_by_id(self, *, plan_id: str) -> Plan | None:
        return self.plans.get(plan_id)

    def list_active_plans(self, *, use_cache: bool = True) -> list[Plan]:
        if use_cache:
            self.cached_reads += 1
        return sorted((p for p in self.plans.values() if p.is_active), key=lambda p: p.price_inr)

    def update_plan_provider_ids(
        self,
        *,
        plan_id: str,
        razorpay_plan_id: str | None = None,
        stripe_price_id: str | None = None,
    ) -> None:
        plan = self.plans[plan_id]
        if razorpay_plan_id is not None:
            plan = replace(plan, razorpay_plan_id=razorpay_plan_id)
        if stripe_price_id is not None:
            plan = replace(plan, stripe_price_id=stripe_price_id)
        self.plans[plan_id] = plan


class FakeSubscriptionStore:
    """In-memory stand-in for both the subscription and the payment ledger ports."""

    def __init__(self, catalog: FakePlanCatalog, subscriptions: list[Subscription] | None = None):
        self.catalog = catalog
        self.subscriptions: dict[str, Subscription] = {s.id: s for s in (subscriptions or [])}
        self.payments: list[PaymentRecord] = []
        self.trial_targets: list[TrialReminderTarget] = []
        self.writes = 0
        self._ids = count(100)

    def get_latest_subscription(self, *, workspace_id: str) -> SubscriptionWithPlan | None:
        rows = [s for s in self.subscriptions.values() if s.workspace_id == workspace_id]
        if not rows:
            return None
        latest = max(rows, key=lambda s: s.created_at)
        return SubscriptionWithPlan(subscription=latest, plan=self.catalog.plans[latest.plan_id])

    def get_subscription_by_provider_id(self, *, provider_subscription_id: str) -> Subscription | None:
        for subscription in self.subscriptions.values():
            if subscription.provider_subscription_id == provider_subscription_id:
                return subscription
        return None

    def create_subscription(self, *, workspace_id, plan_id, status, trial_start, trial_end, now) -> Subscription:
        subscription = make_subscription(
            id=f"sub-{next(self._ids)}",
            workspace_id=workspace_id,
            plan_id=plan_id,
            status=status,
            trial_start=trial_start,
            trial_end=trial_end,
            created_at=now,
            updated_at=now,
        )
        self.subscriptions[subscription.id] = subscription
        self.writes += 1
        return subscription

    def update_status(self, *, subscription_id: str, status: str, now: datetime) -> None:
        self._update(subscription_id, status=status, updated_at=now)

    def update_plan(self, *, subscription_id: str, plan_id: str, now: datetime) -> None:
        self._update(subscription_id, plan_id=plan_id, updated_at=now)

    def set_cancel_at_period_end(self, *, subscription_id: str, now: datetime) -> None:
        self._update(subscription_id, cancel_at_period_end=True, updated_at=now)

    def link_provider_subscription(
        self, *, subscription_id, provider, provider_subscription_id, plan_id, status, now
    ) -> None:
        changes = dict(payment_provider=provider, provider_subscription_id=provider_subscription_id, updated_at=now)
        if plan_id is not None:
            changes["plan_id"] = plan_id
        if status is not None:
            changes["status"] = status
        self._update(subscription_id, **changes)

    def update_by_provider_subscription_id(
        self,
        *,
        provider_subscription_id: str,
        now: datetime,
        status: str | None = None,
        current_period_start: datetime | None = None,
        current_period_end: datetime | None = None,
        cancel_at_period_end: bool | None = None,
    ) -> int:
        changes = {
            key: value
            for key, value in dict(
                status=status,
                current_period_start=current_period_start,
                current_period_end=current_period_end,
                cancel_at_period_end=cancel_at_period_end,
            ).items()
            if value is not None
        }
        matched = 0
        for subscription in list(self.subscriptions.values()):
            if subscription.provider_subscription_id == provider_subscription_id:
                self._update(subscription.id, updated_at=now, **changes)
                matched += 1
        return matched

    def list_trialing_subscriptions(self) -> list[TrialReminderTarget]:
        return list(self.trial_targets)

    def record_payment(
        self,
        *,
        workspace_id,
        subscription_id,
        amount,
        currency,
        provider,
        provider_payment_id,
        status,
        description,
    ) -> bool:
        for existing in self.payments:
            if existing.provider == provider and existing.provider_payment_id == provider_payment_id:
                return False
        self.payments.append(
            PaymentRecord(
                id=f"pay-{next(self._ids)}",
                workspace_id=workspace_id,
                subscription_id=subscription_id,
                amount=amount,
                currency=currency,
                provider=provider,
                provider_payment_id=provider_payment_id,
                status=status,
                description=description,
                created_at=NOW,
            )
        )
        return True

    def list_payments(self, *, workspace_id: str, limit: int = 20) -> list[PaymentRecord]:
        rows = [p for p in self.payments if p.workspace_id == workspace_id]
        return list(reversed(rows))[:limit]

    def _update(self, subscription_id: str, **changes) -> None:
        self.subscriptions[subscription_id] = replace(self.subscriptions[subscription_id], **changes)
        self.writes += 1


class FakeWorkspaceStore:
    def __init__(self):
        self.users: dict[str, User] = {}
        self.workspaces: dict[str, Workspace] = {}
        self.members: dict[str, set[str]] = {}
        self.projects: dict[str, int] = {}
        self.roles: dict[tuple[str, str], str] = {}
        self._ids = count(1)

    def add_user(self, user_id: str = "user-1", email: str = "owner@example.com", name: str | None = "Owner") -> User:
        user = User(id=user_id, name=name, email=email)
        self.users[user_id] = user
        return user

    def add_workspace(self, workspace_id: str, *, owner_id: str = "user-1", members: int = 0, projects: int = 0):
        self.workspaces[workspace_id] = Workspace(
            id=workspace_id,
            name=f"Workspace {workspace_id}",
            slug=workspace_id,
            owner_id=owner_id,
            stripe_customer_id=None,
            created_at=NOW,
        )
        self.members[workspace_id] = {owner_id} | {f"member-{i}" for i in range(max(members - 1, 0))}
        self.projects[workspace_id] = projects

    def get_user(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_workspace(self, *, workspace_id: str) -> Workspace | None:
        return self.workspaces.get(workspace_id)

    def create_workspace(self, *, name: str, slug: str, owner_id: str, now: datetime) -> Workspace:
        workspace = Workspace(
            id=f"ws-new-{next(self._ids)}",
            name=name,
            slug=slug,
            owner_id=owner_id,
            stripe_customer_id=None,
            created_at=now,
        )
        self.workspaces[workspace.id] = workspace
        self.members.setdefault(workspace.id, set())
        self.projects.setdefault(workspace.id, 0)
        return workspace

    def add_member(self, *, workspace_id: str, user_id: str, role: str, now: datetime) -> None:
        self.members.setdefault(workspace_id, set()).add(user_id)
        self.roles[(workspace_id, user_id)] = role

    def is_member(self, *, workspace_id: str, user_id: str) -> bool:
        return user_id in self.members.get(workspace_id, set())

    def list_user_workspace_ids(self, *, user_id: str) -> list[str]:
        return [ws_id for ws_id, members in self.members.items() if user_id in members]

    def count_members(self, *, workspace_id: str) -> int:
        return len(self.members.get(workspace_id, set()))

    def count_projects(self, *, workspace_id: str) -> int:
        return self.projects.get(workspace_id, 0)

    def update_stripe_customer_id(self, *, workspace_id: str, stripe_customer_id: str) -> None:
        self.workspaces[workspace_id] = replace(self.workspaces[workspace_id], stripe_customer_id=stripe_customer_id)


class FakeRazorpayClient:
    def __init__(self, *, fail: Exception | None = None):
        self.calls: list[tuple] = []
        self.fail = fail

    def create_plan(self, *, name, amount, currency, period, interval) -> str:
        self.calls.append(("create_plan", name, amount, currency, period, interval))
        return f"plan_rzp_{name.lower()}"

    def create_subscription(self, *, plan_id, total_count, customer_notify, notes) -> RazorpaySubscriptionResult:
        self.calls.append(("create_subscription", plan_id, total_count, customer_notify, notes))
        return RazorpaySubscriptionResult(id="sub_rzp_new", short_url="https://rzp.io/i/abc")

    def update_subscription(self, *, subscription_id, plan_id) -> None:
        if self.fail is not None:
            raise self.fail
        self.calls.append(("update_subscription", subscription_id, plan_id))

    def cancel_subscription(self, *, subscription_id, cancel_at_cycle_end=True) -> None:
        if self.fail is not None:
            raise self.fail
        self.calls.append(("cancel_subscription", subscription_id, cancel_at_cycle_end))


class FakeStripeClient:
    def __init__(self):
        self.calls: list[tuple] = []

    def create_customer(self, *, email, name) -> str:
        self.calls.append(("create_customer", email, name))
        return "cus_new"

    def create_checkout_session(
        self, *, workspace_id, plan_slug, price_id, success_url, cancel_url, customer_id
    ) -> StripeCheckoutSessionResult:
        self.calls.append(("create_checkout_session", workspace_id, plan_slug, price_id, customer_id))
        return StripeCheckoutSessionResult(id="cs_test_1", url="https://checkout.stripe.com/c/cs_test_1")

    def update_subscription_price(self, *, subscription_id, price_id) -> None:
        self.calls.append(("update_subscription_price", subscription_id, price_id))

    def cancel_subscription(self, *, subscription_id, at_period_end=True) -> None:
        self.calls.append(("cancel_subscription", subscription_id, at_period_end))


class FakeNotifier:
    def __init__(self, *, succeed: bool = True):
        self.sent: list[tuple[str, str, int]] = []
        self.succeed = succeed

    def send_trial_expiry_notice(self, *, to, workspace_name, days_remaining, billing_url) -> bool:
        self.sent.append((to, workspace_name, days_remaining))
        return self.succeed
