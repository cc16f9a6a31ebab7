# costing/tests/test_costing_engine.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from costing.exceptions import CostingError, OrderPayloadError
from costing.models import OrderCosting
from costing.services.costing_engine import cost_order, estimate_order_cost
from inventory.exceptions import UnitConversionError
from inventory.models import BranchStock, RawItem, StockAlert, StockMovement
from inventory.services.stock_ledger import adjust
from recipes.models import MenuProduct, ProductAddon, RecipeLine

TENANT = "tenant-a"
BRANCH = "branch-1"


def _line(product, quantity=1, addons=None):
    return {"product_id": str(product.pk), "quantity": quantity, "addons": addons or []}


class CostingFixtureMixin:
    def setUp(self):
        self.beans = RawItem.objects.create(
            tenant_id=TENANT, code="BEANS", name="Coffee Beans", unit="g", unit_cost=Decimal("0.0200")
        )
        self.milk = RawItem.objects.create(
            tenant_id=TENANT, code="MILK", name="Milk", unit="l", unit_cost=Decimal("1.2000")
        )

        self.espresso = MenuProduct.objects.create(tenant_id=TENANT, name="Espresso", price=Decimal("2.50"))
        RecipeLine.objects.create(product=self.espresso, raw_item=self.beans, quantity=Decimal("18"), unit="g")

        self.latte = MenuProduct.objects.create(tenant_id=TENANT, name="Latte", price=Decimal("4.50"))
        RecipeLine.objects.create(product=self.latte, raw_item=self.beans, quantity=Decimal("18"), unit="g")
        RecipeLine.objects.create(product=self.latte, raw_item=self.milk, quantity=Decimal("200"), unit="ml")

        self.extra_shot = ProductAddon.objects.create(
            tenant_id=TENANT,
            name="Extra shot",
            raw_item=self.beans,
            quantity_per_unit=Decimal("9"),
            unit="g",
        )

    def stock(self, raw_item, quantity, branch=BRANCH):
        adjust(branch_id=branch, raw_item_id=raw_item.pk, delta=quantity, movement_type="purchase")

    def on_hand(self, raw_item, branch=BRANCH):
        return BranchStock.objects.get(branch_id=branch, raw_item=raw_item).current_quantity


class CostOrderTests(CostingFixtureMixin, TestCase):
    """
    GUARANTEES:
    - One deduction per raw item per order, summed across lines
    - At most once per order_id: retries replay the stored report
    - Shortages are reported, never fatal
    """

    def test_espresso_deducts_recipe_quantity(self):
        self.stock(self.beans, 1000)

        report = cost_order(order_id="order-1", branch_id=BRANCH, line_items=[_line(self.espresso)])

        self.assertTrue(report.success)
        self.assertEqual(self.on_hand(self.beans), Decimal("982"))
        self.assertEqual(report.cost_of_goods, Decimal("0.36"))
        self.assertEqual(len(report.deductions), 1)

        detail = report.deductions[0]
        self.assertEqual(detail.status, "deducted")
        self.assertEqual(detail.previous_quantity, Decimal("1000"))
        self.assertEqual(detail.new_quantity, Decimal("982"))

        movement = StockMovement.objects.get(reference_id="order-1")
        self.assertEqual(movement.movement_type, StockMovement.MovementType.DEDUCTION)
        self.assertEqual(movement.delta, Decimal("-18"))

    def test_retry_replays_stored_report_without_deducting(self):
        self.stock(self.beans, 1000)
        first = cost_order(order_id="order-2", branch_id=BRANCH, line_items=[_line(self.espresso)])

        with self.assertLogs("costing.services.costing_engine", level="INFO"):
            second = cost_order(order_id="order-2", branch_id=BRANCH, line_items=[_line(self.espresso, 5)])

        self.assertEqual(second.to_dict(), first.to_dict())
        self.assertEqual(self.on_hand(self.beans), Decimal("982"))
        self.assertEqual(StockMovement.objects.filter(reference_id="order-2").count(), 1)
        self.assertEqual(OrderCosting.objects.filter(order_id="order-2").count(), 1)

    def test_shortage_goes_negative_and_is_reported(self):
        self.stock(self.beans, 30)

        report = cost_order(
            order_id="order-3",
            branch_id=BRANCH,
            line_items=[_line(self.espresso, 1, [{"addon_id": str(self.extra_shot.pk), "quantity": 1}]),
                        _line(self.espresso, 1)],
        )

        self.assertFalse(report.success)
        self.assertEqual(self.on_hand(self.beans), Decimal("-15"))
        shortage = report.shortages[0]
        self.assertEqual(shortage.required, Decimal("45"))
        self.assertEqual(shortage.available, Decimal("30"))
        self.assertEqual(report.deductions[0].status, "shortage")
        self.assertTrue(any("Insufficient" in w for w in report.warnings))

        record = OrderCosting.objects.get(order_id="order-3")
        self.assertTrue(record.has_shortages)
        self.assertEqual(record.report["success"], False)

    def test_shortage_from_empty_stock_reports_zero_available(self):
        report = cost_order(order_id="order-4", branch_id=BRANCH, line_items=[_line(self.espresso)])

        self.assertEqual(report.shortages[0].available, Decimal("0"))
        self.assertEqual(self.on_hand(self.beans), Decimal("-18"))
        self.assertTrue(
            StockAlert.objects.filter(
                branch_id=BRANCH, raw_item=self.beans, alert_type=StockAlert.AlertType.OUT_OF_STOCK
            ).exists()
        )

    def test_shared_ingredient_is_deducted_once(self):
        self.stock(self.beans, 1000)
        self.stock(self.milk, 5)

        report = cost_order(
            order_id="order-5",
            branch_id=BRANCH,
            line_items=[_line(self.espresso, 2), _line(self.latte, 1)],
        )

        beans = StockMovement.objects.filter(reference_id="order-5", raw_item=self.beans)
        self.assertEqual(beans.count(), 1)
        self.assertEqual(beans.get().delta, Decimal("-54"))
        self.assertEqual(self.on_hand(self.milk), Decimal("4.8"))
        # 54 g * 0.02 + 0.2 l * 1.20
        self.assertEqual(report.cost_of_goods, Decimal("1.32"))
        self.assertEqual(len(report.deductions), 2)

    def test_recipe_in_grams_against_stock_in_kilograms(self):
        flour = RawItem.objects.create(
            tenant_id=TENANT, code="FLOUR", name="Flour", unit="kg", unit_cost=Decimal("1.5000")
        )
        croissant = MenuProduct.objects.create(tenant_id=TENANT, name="Croissant", price=Decimal("3.00"))
        RecipeLine.objects.create(product=croissant, raw_item=flour, quantity=Decimal("60"), unit="g")
        self.stock(flour, 10)

        report = cost_order(order_id="order-6", branch_id=BRANCH, line_items=[_line(croissant, 3)])

        self.assertEqual(self.on_hand(flour), Decimal("9.82"))
        self.assertEqual(report.deductions[0].quantity, Decimal("0.18"))
        self.assertEqual(report.cost_of_goods, Decimal("0.27"))

    def test_unknown_product_is_skipped_with_warning(self):
        self.stock(self.beans, 100)

        report = cost_order(
            order_id="order-7",
            branch_id=BRANCH,
            line_items=[
                {"product_id": "00000000-0000-0000-0000-000000000000", "quantity": 1},
                _line(self.espresso),
            ],
        )

        self.assertTrue(report.success)
        self.assertEqual(len(report.warnings), 1)
        self.assertEqual(self.on_hand(self.beans), Decimal("82"))

    def test_unmatched_unit_passes_through_with_warning(self):
        cocoa = RawItem.objects.create(tenant_id=TENANT, code="COCOA", name="Cocoa", unit="g")
        mocha = MenuProduct.objects.create(tenant_id=TENANT, name="Mocha", price=Decimal("5.00"))
        RecipeLine.objects.create(product=mocha, raw_item=cocoa, quantity=Decimal("2"), unit="scoop")
        self.stock(cocoa, 100)

        report = cost_order(order_id="order-8", branch_id=BRANCH, line_items=[_line(mocha)])

        self.assertEqual(self.on_hand(cocoa), Decimal("98"))
        self.assertTrue(any("scoop" in w for w in report.warnings))

    @override_settings(COSTING_STRICT_UNIT_CONVERSION=True)
    def test_strict_mode_rolls_back_everything(self):
        cocoa = RawItem.objects.create(tenant_id=TENANT, code="COCOA", name="Cocoa", unit="g")
        mocha = MenuProduct.objects.create(tenant_id=TENANT, name="Mocha", price=Decimal("5.00"))
        RecipeLine.objects.create(product=mocha, raw_item=cocoa, quantity=Decimal("2"), unit="scoop")
        self.stock(self.beans, 100)

        with self.assertRaises(UnitConversionError):
            cost_order(
                order_id="order-9",
                branch_id=BRANCH,
                line_items=[_line(self.espresso), _line(mocha)],
            )

        self.assertEqual(self.on_hand(self.beans), Decimal("100"))
        self.assertFalse(StockMovement.objects.filter(reference_id="order-9").exists())
        self.assertFalse(OrderCosting.objects.filter(order_id="order-9").exists())

    def test_missing_identifiers_are_rejected(self):
        with self.assertRaises(CostingError):
            cost_order(order_id="", branch_id=BRANCH, line_items=[])
        with self.assertRaises(CostingError):
            cost_order(order_id="order-10", branch_id=" ", line_items=[])

    def test_malformed_line_items_are_rejected(self):
        with self.assertRaises(OrderPayloadError):
            cost_order(order_id="order-11", branch_id=BRANCH, line_items=[{"product_id": "x", "quantity": 0}])
        self.assertFalse(OrderCosting.objects.filter(order_id="order-11").exists())

    def test_empty_order_is_recorded_with_zero_cost(self):
        report = cost_order(order_id="order-12", branch_id=BRANCH, line_items=[])
        self.assertEqual(report.cost_of_goods, Decimal("0.00"))
        self.assertTrue(OrderCosting.objects.filter(order_id="order-12").exists())


class OrderCostingRecordTests(CostingFixtureMixin, TestCase):
    def test_record_is_immutable(self):
        self.stock(self.beans, 100)
        cost_order(order_id="order-20", branch_id=BRANCH, line_items=[_line(self.espresso)])
        record = OrderCosting.objects.get(order_id="order-20")

        record.cost_of_goods = Decimal("99.00")
        with self.assertRaises(ValidationError):
            record.save()
        with self.assertRaises(ValidationError):
            record.save(update_fields=["cost_of_goods"])
        with self.assertRaises(ValidationError):
            record.delete()


class EstimateTests(CostingFixtureMixin, TestCase):
    def test_estimate_does_not_touch_stock(self):
        self.stock(self.beans, 100)

        estimate = estimate_order_cost(line_items=[_line(self.latte, 2)])

        self.assertEqual(estimate["cost_of_goods"], Decimal("1.20"))
        self.assertEqual(len(estimate["ingredients"]), 2)
        self.assertEqual(self.on_hand(self.beans), Decimal("100"))
        self.assertFalse(StockMovement.objects.filter(movement_type="deduction").exists())
        self.assertFalse(OrderCosting.objects.exists())
