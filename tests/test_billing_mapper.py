from __future__ import annotations

from datetime import datetime, timezone
import unittest
from uuid import UUID

from voicetask.infrastructure.db.mappers.billing_mapper import (
    map_row_to_payment_record,
    map_row_to_plan,
    map_row_to_subscription,
)


CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


class BillingMapperTests(unittest.TestCase):
    def test_map_row_to_plan_reads_prefixed_columns_and_json_features(self):
        row = {
            "p_id": UUID("00000000-0000-0000-0000-000000000001"),
            "p_name": "Agency",
            "p_slug": "agency",
            "p_price_inr": 1999,
            "p_price_usd": 35,
            "p_max_users": 15,
            "p_max_projects": -1,
            "p_max_workspaces": -1,
            "p_max_storage_mb": 50000,
            "p_features": '["voice_capture", "client_portal"]',
            "p_is_active": True,
            "p_razorpay_plan_id": None,
            "p_stripe_price_id": "price_agency",
        }

        plan = map_row_to_plan(row, prefix="p_")

        self.assertEqual(plan.id, "00000000-0000-0000-0000-000000000001")
        self.assertEqual(plan.max_projects, -1)
        self.assertEqual(plan.max_workspaces, -1)
        self.assertEqual(plan.features, ("voice_capture", "client_portal"))
        self.assertIsNone(plan.razorpay_plan_id)
        self.assertEqual(plan.stripe_price_id, "price_agency")

    def test_map_row_to_subscription_keeps_nullable_fields(self):
        row = {
            "id": UUID("00000000-0000-0000-0000-0000000000aa"),
            "workspace_id": UUID("00000000-0000-0000-0000-0000000000bb"),
            "plan_id": UUID("00000000-0000-0000-0000-000000000001"),
            "status": "trialing",
            "trial_start": CREATED,
            "trial_end": None,
            "current_period_start": None,
            "current_period_end": None,
            "payment_provider": None,
            "provider_subscription_id": None,
            "cancel_at_period_end": False,
            "created_at": CREATED,
            "updated_at": CREATED,
        }

        subscription = map_row_to_subscription(row)

        self.assertEqual(subscription.workspace_id, "00000000-0000-0000-0000-0000000000bb")
        self.assertEqual(subscription.status, "trialing")
        self.assertIsNone(subscription.trial_end)
        self.assertFalse(subscription.cancel_at_period_end)

    def test_map_row_to_payment_record(self):
        row = {
            "id": 7,
            "workspace_id": "ws-1",
            "subscription_id": "sub-1",
            "amount": 1900,
            "currency": "USD",
            "provider": "stripe",
            "provider_payment_id": "in_1",
            "status": "captured",
            "description": "Subscription payment",
            "created_at": CREATED,
        }

        record = map_row_to_payment_record(row)

        self.assertEqual(record.id, "7")
        self.assertEqual(record.amount, 1900)
        self.assertEqual(record.currency, "USD")


if __name__ == "__main__":
    unittest.main()
