import unittest
from datetime import datetime, timedelta, timezone

from storefront.entitlements import (
    AccessType,
    EntitlementStore,
    InMemoryEntitlementBackend,
    SubscriptionStatus,
)


T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
NEXT = T0 + timedelta(days=30)


class EntitlementViewTests(unittest.TestCase):
    def setUp(self):
        self.store = EntitlementStore()

    def test_unknown_email_has_no_access(self):
        view = self.store.get_entitlement("nobody@x.com")
        self.assertFalse(view.has_active_access)
        self.assertEqual(view.access_type, [])
        self.assertIsNone(view.subscription)
        self.assertEqual(view.purchases, [])

    def test_purchase_grants_product_access(self):
        self.store.record_purchase("a@x.com", "pay_1", "prod_1", 1000, "USD", T0)
        view = self.store.get_entitlement("a@x.com")
        self.assertTrue(view.has_active_access)
        self.assertIn(AccessType.PRODUCT, view.access_type)
        self.assertEqual(view.purchases[0].purchased_at, T0)
        self.assertEqual(view.purchases[0].currency, "USD")

    def test_duplicate_payment_ids_are_kept(self):
        self.store.record_purchase("a@x.com", "pay_1", "prod_1", 1000, "USD", T0)
        self.store.record_purchase("a@x.com", "pay_1", "prod_1", 1000, "USD", T0)
        self.assertEqual(len(self.store.get_purchases("a@x.com")), 2)

    def test_cancelled_subscription_loses_access(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.mark_subscription_cancelled("a@x.com")
        view = self.store.get_entitlement("a@x.com")
        self.assertFalse(view.has_active_access)
        self.assertEqual(view.subscription.status, SubscriptionStatus.CANCELLED)

    def test_active_subscription_and_purchase_list_both_access_types(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.record_purchase("a@x.com", "pay_1", "prod_2", 1000, "USD", T0)
        view = self.store.get_entitlement("a@x.com")
        self.assertEqual(view.access_type, [AccessType.SUBSCRIPTION, AccessType.PRODUCT])

    def test_cancelled_subscription_with_purchase_keeps_product_access(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.record_purchase("a@x.com", "pay_1", "prod_2", 1000, "USD", T0)
        self.store.mark_subscription_cancelled("a@x.com")
        view = self.store.get_entitlement("a@x.com")
        self.assertTrue(view.has_active_access)
        self.assertEqual(view.access_type, [AccessType.PRODUCT])

    def test_emails_are_not_normalized(self):
        self.store.record_purchase("A@x.com", "pay_1", "prod_1", 1000, "USD", T0)
        self.assertFalse(self.store.get_entitlement("a@x.com").has_active_access)
        self.assertFalse(self.store.get_entitlement(" A@x.com").has_active_access)
        self.assertTrue(self.store.get_entitlement("A@x.com").has_active_access)


class SubscriptionLifecycleTests(unittest.TestCase):
    def setUp(self):
        self.store = EntitlementStore(InMemoryEntitlementBackend())

    def test_renewal_for_unknown_customer_is_dropped(self):
        self.assertFalse(self.store.renew_subscription("unknown@x.com", NEXT))
        self.assertIsNone(self.store.get_subscription("unknown@x.com"))
        self.assertIsNone(self.store.get_entitlement("unknown@x.com").subscription)

    def test_cancel_and_fail_for_unknown_customer_are_dropped(self):
        self.assertFalse(self.store.mark_subscription_cancelled("unknown@x.com"))
        self.assertFalse(self.store.mark_subscription_failed("unknown@x.com", "card_declined"))
        self.assertIsNone(self.store.get_subscription("unknown@x.com"))

    def test_status_changes_report_applied(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.assertTrue(self.store.mark_subscription_failed("a@x.com", "card_declined"))
        self.assertTrue(self.store.renew_subscription("a@x.com", NEXT))
        self.assertTrue(self.store.mark_subscription_cancelled("a@x.com"))

    def test_second_activation_overwrites_first(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.activate_subscription("a@x.com", "sub_2", "prod_2", NEXT, 700, T0)
        record = self.store.get_subscription("a@x.com")
        self.assertEqual(record.subscription_id, "sub_2")
        self.assertEqual(record.recurring_amount, 700)

    def test_activation_after_cancel_replaces_record(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.mark_subscription_failed("a@x.com", "card_declined")
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        record = self.store.get_subscription("a@x.com")
        self.assertEqual(record.status, SubscriptionStatus.ACTIVE)
        self.assertIsNone(record.failure_reason)

    def test_renewal_reactivates_and_moves_billing_date(self):
        later = NEXT + timedelta(days=30)
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.mark_subscription_failed("a@x.com", None)
        self.store.renew_subscription("a@x.com", later)
        record = self.store.get_subscription("a@x.com")
        self.assertEqual(record.status, SubscriptionStatus.ACTIVE)
        self.assertEqual(record.next_billing_date, later)
        self.assertIsNotNone(record.last_renewed_at)
        self.assertTrue(self.store.get_entitlement("a@x.com").has_active_access)

    def test_failure_records_reason(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.mark_subscription_failed("a@x.com", "card_declined")
        record = self.store.get_subscription("a@x.com")
        self.assertEqual(record.status, SubscriptionStatus.FAILED)
        self.assertEqual(record.failure_reason, "card_declined")
        self.assertFalse(self.store.get_entitlement("a@x.com").has_active_access)

    def test_returned_records_are_copies(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        record = self.store.get_subscription("a@x.com")
        record.status = SubscriptionStatus.CANCELLED
        self.assertEqual(self.store.get_subscription("a@x.com").status, SubscriptionStatus.ACTIVE)

    def test_clear_drops_everything(self):
        self.store.activate_subscription("a@x.com", "sub_1", "prod_1", NEXT, 500, T0)
        self.store.record_purchase("a@x.com", "pay_1", "prod_1", 1000, "USD", T0)
        self.store.clear()
        self.assertFalse(self.store.get_entitlement("a@x.com").has_active_access)


class StoreIsolationTests(unittest.TestCase):
    def test_separate_stores_do_not_share_state(self):
        first = EntitlementStore()
        second = EntitlementStore()
        first.record_purchase("a@x.com", "pay_1", "prod_1", 1000, "USD", T0)
        self.assertFalse(second.get_entitlement("a@x.com").has_active_access)


if __name__ == "__main__":
    unittest.main()
