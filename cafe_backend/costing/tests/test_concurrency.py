# costing/tests/test_concurrency.py

"""
Row-lock and unique-constraint behaviour under real concurrent transactions.

SQLite serializes writers at the database level, so these only run against
a server database (DATABASE_URL=postgres://...).
"""

import threading
from decimal import Decimal
from unittest import skipIf

from django.db import connection
from django.test import TransactionTestCase

from accounting.models import Account, JournalEntry
from accounting.services.chart_of_accounts import get_account_balance, seed_default_chart
from accounting.services.posting import post_order_cogs_to_ledger
from costing.models import OrderCosting
from costing.services.costing_engine import cost_order
from inventory.models import BranchStock, RawItem, StockMovement
from inventory.services.stock_ledger import adjust
from recipes.models import MenuProduct, RecipeLine

TENANT = "tenant-a"
BRANCH = "branch-1"
WORKERS = 6

needs_row_locks = skipIf(connection.vendor == "sqlite", "SQLite has no row-level locking")


def run_concurrently(fn, workers=WORKERS):
    """Start `workers` threads on `fn` at the same moment; return (results, errors)."""
    barrier = threading.Barrier(workers)
    results, errors = [], []

    def worker():
        try:
            barrier.wait()
            results.append(fn())
        except Exception as exc:  # reported by the calling test
            errors.append(exc)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results, errors


@needs_row_locks
class ConcurrentStockAdjustmentTests(TransactionTestCase):
    def setUp(self):
        self.beans = RawItem.objects.create(tenant_id=TENANT, code="BEANS", name="Coffee Beans", unit="g")
        adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=100, movement_type="purchase")

    def test_parallel_adjustments_chain_their_movements(self):
        _, errors = run_concurrently(
            lambda: adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=5, movement_type="adjustment")
        )

        self.assertEqual(errors, [])
        stock = BranchStock.objects.get(branch_id=BRANCH, raw_item=self.beans)
        self.assertEqual(stock.current_quantity, Decimal("100") + 5 * WORKERS)

        movements = list(StockMovement.objects.filter(raw_item=self.beans).order_by("new_quantity"))
        self.assertEqual(len(movements), WORKERS + 1)
        for before, after in zip(movements, movements[1:]):
            self.assertEqual(after.previous_quantity, before.new_quantity)
        self.assertEqual(movements[-1].new_quantity, stock.current_quantity)


@needs_row_locks
class ConcurrentPostingTests(TransactionTestCase):
    def setUp(self):
        seed_default_chart(tenant_id=TENANT)

    def test_one_entry_per_reference(self):
        results, errors = run_concurrently(
            lambda: post_order_cogs_to_ledger(tenant_id=TENANT, order_id="O1", branch_id=BRANCH, amount="5.40")
        )

        self.assertEqual(errors, [])
        self.assertEqual(len({entry.pk for entry in results}), 1)
        self.assertEqual(JournalEntry.objects.filter(tenant_id=TENANT).count(), 1)
        cogs = Account.objects.get(tenant_id=TENANT, account_number="5100")
        self.assertEqual(get_account_balance(cogs), Decimal("5.40"))


@needs_row_locks
class ConcurrentOrderCostingTests(TransactionTestCase):
    def setUp(self):
        self.beans = RawItem.objects.create(
            tenant_id=TENANT, code="BEANS", name="Coffee Beans", unit="g", unit_cost=Decimal("0.0200")
        )
        self.espresso = MenuProduct.objects.create(tenant_id=TENANT, name="Espresso", price=Decimal("2.50"))
        RecipeLine.objects.create(product=self.espresso, raw_item=self.beans, quantity=Decimal("18"), unit="g")
        adjust(branch_id=BRANCH, raw_item_id=self.beans.pk, delta=1000, movement_type="purchase")

    def test_same_order_is_deducted_once(self):
        line_items = [{"product_id": str(self.espresso.pk), "quantity": 2}]
        results, errors = run_concurrently(
            lambda: cost_order(order_id="o-race", branch_id=BRANCH, line_items=line_items)
        )

        self.assertEqual(errors, [])
        self.assertEqual({report.cost_of_goods for report in results}, {Decimal("0.72")})
        self.assertEqual(OrderCosting.objects.filter(order_id="o-race").count(), 1)
        self.assertEqual(StockMovement.objects.filter(reference_id="o-race").count(), 1)
        stock = BranchStock.objects.get(branch_id=BRANCH, raw_item=self.beans)
        self.assertEqual(stock.current_quantity, Decimal("964"))
