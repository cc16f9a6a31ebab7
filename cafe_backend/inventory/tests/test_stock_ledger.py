# inventory/tests/test_stock_ledger.py

import random
import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from inventory.exceptions import StockAdjustmentError
from inventory.models import BranchStock, RawItem, StockMovement
from inventory.services.stock_ledger import (
    adjust,
    get_movement_history,
    get_stock_level,
    set_min_stock_level,
    transfer_stock,
)

TENANT = "tenant-a"
BRANCH = "branch-1"


def _raw_item(code="BEANS", name="Coffee Beans", unit="g", unit_cost="0.0200"):
    return RawItem.objects.create(
        tenant_id=TENANT,
        code=code,
        name=name,
        unit=unit,
        unit_cost=Decimal(unit_cost),
    )


class AdjustTests(TestCase):
    """
    GUARANTEES:
    - Every adjust() appends exactly one movement
    - previous + delta == new, and the stock row holds new
    - Negative stock is allowed and never clamped
    """

    def setUp(self):
        self.beans = _raw_item()

    def test_first_adjustment_creates_stock_row_at_zero(self):
        self.assertFalse(BranchStock.objects.filter(branch_id=BRANCH, raw_item=self.beans).exists())

        result = adjust(
            branch_id=BRANCH,
            raw_item_id=self.beans.pk,
            delta="1000",
            movement_type=StockMovement.MovementType.PURCHASE,
            reference_id="PO-1",
        )

        self.assertEqual(result.previous_quantity, Decimal("0"))
        self.assertEqual(result.new_quantity, Decimal("1000"))
        stock = BranchStock.objects.get(branch_id=BRANCH, raw_item=self.beans)
        self.assertEqual(stock.current_quantity, Decimal("1000"))
        self.assertEqual(StockMovement.objects.filter(raw_item=self.beans).count(), 1)

    def test_negative_result_is_recorded_not_clamped(self):
        adjust(
            branch_id=BRANCH,
            raw_item_id=self.beans.pk,
            delta=30,
            movement_type=StockMovement.MovementType.PURCHASE,
        )

        with self.assertLogs("inventory.services.stock_ledger", level="WARNING"):
            result = adjust(
                branch_id=BRANCH,
                raw_item_id=self.beans.pk,
                delta=-50,
                movement_type=StockMovement.MovementType.DEDUCTION,
                reference_id="order-9",
            )

        self.assertTrue(result.is_shortage)
        self.assertEqual(result.new_quantity, Decimal("-20"))
        self.assertEqual(
            BranchStock.objects.get(branch_id=BRANCH, raw_item=self.beans).current_quantity,
            Decimal("-20"),
        )

    def test_zero_delta_rejected(self):
        with self.assertRaises(StockAdjustmentError):
            adjust(
                branch_id=BRANCH,
                raw_item_id=self.beans.pk,
                delta=0,
                movement_type=StockMovement.MovementType.ADJUSTMENT,
            )
        self.assertFalse(StockMovement.objects.exists())

    def test_invalid_inputs_rejected(self):
        with self.assertRaises(StockAdjustmentError):
            adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=1, movement_type="gift")
        with self.assertRaises(StockAdjustmentError):
            adjust(branch_id="  ", raw_item_id=self.beans.pk, delta=1, movement_type="adjustment")
        with self.assertRaises(StockAdjustmentError):
            adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta="abc", movement_type="adjustment")

    def test_unknown_raw_item_rejected(self):
        missing_id = uuid.uuid4()

        with self.assertRaises(StockAdjustmentError):
            adjust(branch_id=BRANCH, raw_item_id=missing_id, delta=1, movement_type="adjustment")

    def test_movements_are_immutable(self):
        result = adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=5, movement_type="adjustment")
        movement = result.movement

        movement.note = "edited"
        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()

    def test_movement_sum_matches_current_quantity(self):
        rng = random.Random(7)
        for _ in range(60):
            delta = Decimal(rng.randint(-500, 500)) / Decimal("10")
            if delta == 0:
                continue
            adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=delta, movement_type="adjustment")

        stock = BranchStock.objects.get(branch_id=BRANCH, raw_item=self.beans)
        total = sum(StockMovement.objects.filter(raw_item=self.beans).values_list("delta", flat=True))
        self.assertEqual(stock.current_quantity, total)

        for movement in StockMovement.objects.filter(raw_item=self.beans):
            self.assertEqual(movement.previous_quantity + movement.delta, movement.new_quantity)

    def test_branches_are_independent(self):
        adjust(branch_id="branch-1", raw_item_id=self.beans.pk, delta=100, movement_type="purchase")
        adjust(branch_id="branch-2", raw_item_id=self.beans.pk, delta=-10, movement_type="deduction")

        self.assertEqual(get_stock_level(branch_id="branch-1", raw_item=self.beans).quantity, Decimal("100"))
        self.assertEqual(get_stock_level(branch_id="branch-2", raw_item=self.beans).quantity, Decimal("-10"))


class StockLevelTests(TestCase):
    def setUp(self):
        self.milk = _raw_item(code="MILK", name="Milk", unit="ml", unit_cost="0.0015")

    def test_missing_row_reads_as_out_of_stock(self):
        level = get_stock_level(branch_id=BRANCH, raw_item=self.milk)
        self.assertEqual(level.quantity, Decimal("0"))
        self.assertEqual(level.status, "out_of_stock")
        self.assertEqual(level.unit, "ml")

    def test_status_follows_threshold(self):
        set_min_stock_level(branch_id=BRANCH, raw_item=self.milk, min_stock_level=500)
        adjust(branch_id=BRANCH, raw_item_id=self.milk.pk, delta=300, movement_type="purchase")
        self.assertEqual(get_stock_level(branch_id=BRANCH, raw_item=self.milk).status, "low")

        adjust(branch_id=BRANCH, raw_item_id=self.milk.pk, delta=1000, movement_type="purchase")
        level = get_stock_level(branch_id=BRANCH, raw_item=self.milk)
        self.assertEqual(level.status, "sufficient")
        self.assertEqual(level.min_stock_level, Decimal("500"))

    def test_negative_threshold_rejected(self):
        with self.assertRaises(StockAdjustmentError):
            set_min_stock_level(branch_id=BRANCH, raw_item=self.milk, min_stock_level=-1)

    def test_setting_threshold_does_not_move_stock(self):
        set_min_stock_level(branch_id=BRANCH, raw_item=self.milk, min_stock_level=10)
        self.assertFalse(StockMovement.objects.exists())


class TransferAndHistoryTests(TestCase):
    def setUp(self):
        self.cups = _raw_item(code="CUP12", name="Cup 12oz", unit="pcs", unit_cost="0.1000")
        adjust(branch_id="branch-1", raw_item_id=self.cups.pk, delta=200, movement_type="purchase")

    def test_transfer_writes_two_movements(self):
        out_leg, in_leg = transfer_stock(
            from_branch_id="branch-1",
            to_branch_id="branch-2",
            raw_item=self.cups,
            quantity=50,
            reference_id="TR-1",
        )

        self.assertEqual(out_leg.new_quantity, Decimal("150"))
        self.assertEqual(in_leg.new_quantity, Decimal("50"))
        transfers = StockMovement.objects.filter(movement_type=StockMovement.MovementType.TRANSFER)
        self.assertEqual(transfers.count(), 2)
        self.assertEqual(sum(m.delta for m in transfers), Decimal("0"))

    def test_transfer_to_same_branch_rejected(self):
        with self.assertRaises(StockAdjustmentError):
            transfer_stock(from_branch_id="branch-1", to_branch_id="branch-1", raw_item=self.cups, quantity=1)

    def test_transfer_quantity_must_be_positive(self):
        with self.assertRaises(StockAdjustmentError):
            transfer_stock(from_branch_id="branch-1", to_branch_id="branch-2", raw_item=self.cups, quantity=0)

    def test_movement_history_filters_and_limits(self):
        lids = _raw_item(code="LID12", name="Lid 12oz", unit="pcs")
        adjust(branch_id="branch-1", raw_item_id=lids.pk, delta=10, movement_type="purchase")
        adjust(branch_id="branch-1", raw_item_id=self.cups.pk, delta=-3, movement_type="deduction")

        self.assertEqual(len(get_movement_history(branch_id="branch-1")), 3)
        self.assertEqual(len(get_movement_history(branch_id="branch-1", raw_item=self.cups)), 2)
        self.assertEqual(len(get_movement_history(branch_id="branch-1", limit=1)), 1)
        self.assertEqual(get_movement_history(branch_id="branch-2"), [])
