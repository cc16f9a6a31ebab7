# inventory/models/branch_stock.py

"""
BRANCH STOCK (CURRENT QUANTITY PER BRANCH + RAW ITEM)

current_quantity is service-managed only (inventory.services.stock_ledger).
It may be NEGATIVE: shortages are recorded, never clamped.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from inventory.models.raw_item import RawItem


class BranchStock(models.Model):
    branch_id = models.CharField(max_length=64, db_index=True)

    raw_item = models.ForeignKey(
        RawItem,
        on_delete=models.CASCADE,
        related_name="branch_stocks",
    )

    current_quantity = models.DecimalField(
        max_digits=16,
        decimal_places=4,
        default=Decimal("0.0000"),
    )

    min_stock_level = models.DecimalField(
        max_digits=16,
        decimal_places=4,
        default=Decimal("0.0000"),
        help_text="Restock threshold in the raw item's stocking unit",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["branch_id", "raw_item__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["branch_id", "raw_item"],
                name="uniq_branch_stock_branch_raw_item",
            ),
        ]

    def __str__(self):
        return f"{self.branch_id} | {self.raw_item_id} | {self.current_quantity}"

    @property
    def is_short(self) -> bool:
        return self.current_quantity < 0
