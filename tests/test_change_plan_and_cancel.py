from __future__ import annotations

import pytest

from fakes import (
    FakePlanCatalog,
    FakeRazorpayClient,
    FakeStripeClient,
    FakeSubscriptionStore,
    fixed_clock,
    make_plan,
    make_subscription,
)
from voicetask.application.dto.billing import ChangePlanInput
from voicetask.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from voicetask.application.use_cases.change_plan import ChangePlanUseCase
from voicetask.domain.exceptions import (
    BillingError,
    PlanNotFoundError,
    ProviderRequestError,
    SubscriptionNotFoundError,
)


AGENCY = make_plan(
    id="plan-agency",
    name="Agency",
    slug="agency",
    razorpay_plan_id="plan_rzp_agency",
    stripe_price_id="price_agency",
)


def _store(**subscription):
    catalog = FakePlanCatalog([make_plan(), AGENCY])
    return FakeSubscriptionStore(catalog, [make_subscription(**subscription)])


def _change_plan(store, *, razorpay=None, stripe=None):
    return ChangePlanUseCase(
        subscription_port=store,
        plan_catalog_port=store.catalog,
        razorpay_port=razorpay or FakeRazorpayClient(),
        stripe_port=stripe or FakeStripeClient(),
        clock=fixed_clock(),
    )


def test_change_plan_calls_razorpay_then_updates_locally():
    store = _store(payment_provider="razorpay", provider_subscription_id="sub_rzp_1")
    razorpay = FakeRazorpayClient()

    output = _change_plan(store, razorpay=razorpay).execute(
        ChangePlanInput(workspace_id="ws-1", new_plan_slug="agency")
    )

    assert output.success is True
    assert output.new_plan == "Agency"
    assert razorpay.calls == [("update_subscription", "sub_rzp_1", "plan_rzp_agency")]
    assert store.subscriptions["sub-1"].plan_id == "plan-agency"
    assert store.subscriptions["sub-1"].provider_subscription_id == "sub_rzp_1"


def test_change_plan_uses_stripe_price_for_stripe_subscriptions():
    store = _store(payment_provider="stripe", provider_subscription_id="sub_stripe_1")
    stripe = FakeStripeClient()

    _change_plan(store, stripe=stripe).execute(ChangePlanInput(workspace_id="ws-1", new_plan_slug="agency"))

    assert stripe.calls == [("update_subscription_price", "sub_stripe_1", "price_agency")]


def test_provider_failure_leaves_local_row_untouched():
    store = _store(payment_provider="razorpay", provider_subscription_id="sub_rzp_1")
    razorpay = FakeRazorpayClient(fail=ProviderRequestError("Razorpay request failed."))

    with pytest.raises(ProviderRequestError):
        _change_plan(store, razorpay=razorpay).execute(ChangePlanInput(workspace_id="ws-1", new_plan_slug="agency"))

    assert store.subscriptions["sub-1"].plan_id == "plan-team"
    assert store.writes == 0


def test_change_plan_requires_linked_provider_subscription():
    store = _store()

    with pytest.raises(BillingError, match="No payment provider subscription linked"):
        _change_plan(store).execute(ChangePlanInput(workspace_id="ws-1", new_plan_slug="agency"))


def test_change_plan_to_unknown_plan():
    store = _store(payment_provider="razorpay", provider_subscription_id="sub_rzp_1")

    with pytest.raises(PlanNotFoundError):
        _change_plan(store).execute(ChangePlanInput(workspace_id="ws-1", new_plan_slug="enterprise"))


def test_change_plan_without_subscription():
    store = _store()

    with pytest.raises(SubscriptionNotFoundError):
        _change_plan(store).execute(ChangePlanInput(workspace_id="ws-404", new_plan_slug="agency"))


@pytest.mark.parametrize(
    "provider,expected_call",
    [
        ("razorpay", ("cancel_subscription", "sub_p_1", True)),
        ("stripe", ("cancel_subscription", "sub_p_1", True)),
    ],
)
def test_cancel_sets_cancel_at_period_end(provider, expected_call):
    store = _store(payment_provider=provider, provider_subscription_id="sub_p_1")
    razorpay, stripe = FakeRazorpayClient(), FakeStripeClient()

    CancelSubscriptionUseCase(
        subscription_port=store,
        razorpay_port=razorpay,
        stripe_port=stripe,
        clock=fixed_clock(),
    ).execute(workspace_id="ws-1")

    calls = razorpay.calls if provider == "razorpay" else stripe.calls
    assert calls == [expected_call]
    assert store.subscriptions["sub-1"].cancel_at_period_end is True
    assert store.subscriptions["sub-1"].status == "active"


def test_cancel_provider_failure_is_propagated():
    store = _store(payment_provider="razorpay", provider_subscription_id="sub_p_1")

    with pytest.raises(ProviderRequestError):
        CancelSubscriptionUseCase(
            subscription_port=store,
            razorpay_port=FakeRazorpayClient(fail=ProviderRequestError("boom")),
            stripe_port=FakeStripeClient(),
        ).execute(workspace_id="ws-1")

    assert store.subscriptions["sub-1"].cancel_at_period_end is False
