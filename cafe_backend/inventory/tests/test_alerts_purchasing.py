# inventory/tests/test_alerts_purchasing.py

from decimal import Decimal

from django.test import TestCase, override_settings

from accounting.models import JournalEntry
from accounting.services.chart_of_accounts import seed_default_chart
from inventory.exceptions import StockAdjustmentError
from inventory.models import RawItem, StockAlert, StockMovement
from inventory.services.alerts import evaluate_stock_alert, get_active_alerts, resolve_alert
from inventory.services.purchasing import receive_purchase
from inventory.services.stock_ledger import adjust, get_stock_level, set_min_stock_level, transfer_stock

TENANT = "tenant-a"
BRANCH = "branch-1"


class StockAlertTests(TestCase):
    def setUp(self):
        self.milk = RawItem.objects.create(tenant_id=TENANT, code="MILK", name="Milk", unit="ml")

    def _adjust(self, delta):
        adjust(branch_id=BRANCH, raw_item_id=self.milk.pk, delta=delta, movement_type="adjustment")
        return evaluate_stock_alert(branch_id=BRANCH, raw_item_id=self.milk.pk)

    def test_no_stock_row_means_no_alert(self):
        self.assertIsNone(evaluate_stock_alert(branch_id=BRANCH, raw_item_id=self.milk.pk))

    def test_alert_lifecycle_keeps_one_open_alert(self):
        set_min_stock_level(branch_id=BRANCH, raw_item=self.milk, min_stock_level=500)

        alert = self._adjust(-100)
        self.assertEqual(alert.alert_type, StockAlert.AlertType.OUT_OF_STOCK)

        updated = self._adjust(400)
        self.assertEqual(updated.pk, alert.pk)
        self.assertEqual(updated.alert_type, StockAlert.AlertType.LOW_STOCK)
        self.assertEqual(updated.current_quantity, Decimal("300"))

        self.assertIsNone(self._adjust(1000))
        alert.refresh_from_db()
        self.assertTrue(alert.is_resolved)
        self.assertEqual(alert.resolved_by, "system")
        self.assertFalse(get_active_alerts(branch_id=BRANCH).exists())
        self.assertEqual(StockAlert.objects.count(), 1)

    def test_manual_resolution(self):
        alert = self._adjust(-1)
        resolved = resolve_alert(alert_id=alert.pk, resolved_by="manager")

        self.assertTrue(resolved.is_resolved)
        self.assertEqual(resolved.resolved_by, "manager")
        self.assertIsNotNone(resolved.resolved_at)

        again = resolve_alert(alert_id=alert.pk, resolved_by="someone-else")
        self.assertEqual(again.resolved_by, "manager")

    def test_active_alerts_filter_by_branch(self):
        self._adjust(-5)
        adjust(branch_id="branch-2", raw_item_id=self.milk.pk, delta=-5, movement_type="adjustment")
        evaluate_stock_alert(branch_id="branch-2", raw_item_id=self.milk.pk)

        self.assertEqual(get_active_alerts().count(), 2)
        self.assertEqual(get_active_alerts(branch_id="branch-2").count(), 1)

    def test_stock_changes_evaluate_alerts_on_their_own(self):
        set_min_stock_level(branch_id=BRANCH, raw_item=self.milk, min_stock_level=500)
        alert = get_active_alerts(branch_id=BRANCH).get()
        self.assertEqual(alert.alert_type, StockAlert.AlertType.OUT_OF_STOCK)

        adjust(branch_id=BRANCH, raw_item_id=self.milk.pk, delta=300, movement_type="purchase")
        alert.refresh_from_db()
        self.assertEqual(alert.alert_type, StockAlert.AlertType.LOW_STOCK)
        self.assertEqual(alert.current_quantity, Decimal("300"))

        adjust(branch_id=BRANCH, raw_item_id=self.milk.pk, delta=700, movement_type="purchase")
        alert.refresh_from_db()
        self.assertTrue(alert.is_resolved)

        transfer_stock(from_branch_id=BRANCH, to_branch_id="branch-2", raw_item=self.milk, quantity=900)
        reopened = get_active_alerts(branch_id=BRANCH).get()
        self.assertEqual(reopened.alert_type, StockAlert.AlertType.LOW_STOCK)
        self.assertEqual(reopened.current_quantity, Decimal("100"))


class PurchaseReceiptTests(TestCase):
    def setUp(self):
        self.beans = RawItem.objects.create(
            tenant_id=TENANT,
            code="BEANS",
            name="Coffee Beans",
            unit="g",
            unit_cost=Decimal("0.0100"),
        )

    def test_receipt_converts_units_and_updates_cost(self):
        receipt = receive_purchase(
            branch_id=BRANCH,
            raw_item=self.beans,
            quantity=2,
            unit="kg",
            total_cost="30.00",
            reference_id="GRN-1",
        )

        self.assertEqual(receipt.adjustment.new_quantity, Decimal("2000"))
        self.assertEqual(receipt.adjustment.movement.movement_type, StockMovement.MovementType.PURCHASE)
        self.assertEqual(receipt.unit_cost, Decimal("0.0150"))
        self.beans.refresh_from_db()
        self.assertEqual(self.beans.unit_cost, Decimal("0.0150"))
        # posting is disabled under test settings
        self.assertIsNone(receipt.journal_entry_id)

    def test_receipt_requires_reference_and_positive_quantity(self):
        with self.assertRaises(StockAdjustmentError):
            receive_purchase(branch_id=BRANCH, raw_item=self.beans, quantity=1, total_cost=1, reference_id="")
        with self.assertRaises(StockAdjustmentError):
            receive_purchase(branch_id=BRANCH, raw_item=self.beans, quantity=0, total_cost=1, reference_id="GRN-2")
        with self.assertRaises(StockAdjustmentError):
            receive_purchase(branch_id=BRANCH, raw_item=self.beans, quantity=1, total_cost=-1, reference_id="GRN-3")

    @override_settings(ACCOUNTING_POSTING_ENABLED=True)
    def test_receipt_posts_inventory_against_payables(self):
        seed_default_chart(tenant_id=TENANT)

        receipt = receive_purchase(
            branch_id=BRANCH,
            raw_item=self.beans,
            quantity=1000,
            total_cost="25.00",
            reference_id="GRN-9",
        )

        entry = JournalEntry.objects.get(pk=receipt.journal_entry_id)
        self.assertEqual(entry.status, JournalEntry.Status.POSTED)
        self.assertEqual(entry.reference, "purchase_receipt:GRN-9")

        lines = {line.account.account_number: line for line in entry.lines.select_related("account")}
        self.assertEqual(lines["1130"].debit, Decimal("25.00"))
        self.assertEqual(lines["2110"].credit, Decimal("25.00"))

    @override_settings(ACCOUNTING_POSTING_ENABLED=True)
    def test_repeated_receipt_adjusts_stock_once(self):
        seed_default_chart(tenant_id=TENANT)
        kwargs = dict(branch_id=BRANCH, raw_item=self.beans, quantity=1, unit="kg", total_cost=30, reference_id="PO-1")

        first = receive_purchase(**kwargs)
        second = receive_purchase(**kwargs)

        self.assertFalse(first.replayed)
        self.assertTrue(second.replayed)
        self.assertEqual(second.adjustment.movement.pk, first.adjustment.movement.pk)
        self.assertEqual(second.adjustment.new_quantity, Decimal("1000"))
        self.assertEqual(get_stock_level(branch_id=BRANCH, raw_item=self.beans).quantity, Decimal("1000"))
        self.assertEqual(StockMovement.objects.filter(reference_id="PO-1").count(), 1)
        self.assertEqual(second.journal_entry_id, first.journal_entry_id)
        self.assertEqual(JournalEntry.objects.filter(tenant_id=TENANT).count(), 1)

    def test_reference_reused_for_another_item_is_rejected(self):
        milk = RawItem.objects.create(tenant_id=TENANT, code="MILK", name="Milk", unit="ml")
        receive_purchase(branch_id=BRANCH, raw_item=self.beans, quantity=500, total_cost=5, reference_id="PO-7")

        with self.assertRaises(StockAdjustmentError):
            receive_purchase(branch_id=BRANCH, raw_item=milk, quantity=1000, total_cost=2, reference_id="PO-7")

        self.assertFalse(StockMovement.objects.filter(raw_item=milk).exists())
