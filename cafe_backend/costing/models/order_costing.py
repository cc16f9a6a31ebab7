# costing/models/order_costing.py

"""
ORDER COSTING RECORD

At-most-once marker for order costing.

Guarantees:
- One row per order_id (unique); the row is inserted in the SAME transaction
  as the stock deductions, so it exists if and only if the deductions do
- report holds the JSON-serialized CostingReport returned to every retry
- Immutable once created
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class OrderCosting(models.Model):
    order_id = models.CharField(max_length=100, unique=True)
    branch_id = models.CharField(max_length=64, db_index=True)
    tenant_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    cost_of_goods = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    has_shortages = models.BooleanField(default=False)

    report = models.JSONField(default=dict)

    actor = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["branch_id", "created_at"], name="costing_branch_created_idx"),
        ]

    def __str__(self):
        return f"OrderCosting {self.order_id} - {self.cost_of_goods}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            # The report is written once, right after the insert that claims the order.
            if not update_fields or not set(update_fields) <= {"report", "cost_of_goods", "has_shortages"}:
                raise ValidationError("OrderCosting records are immutable")
            if type(self).objects.filter(pk=self.pk).exclude(report={}).exists():
                raise ValidationError("OrderCosting report is already recorded")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderCosting records cannot be deleted")
