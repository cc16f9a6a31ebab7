# inventory/models/stock_alert.py

from __future__ import annotations

from django.db import models
from django.db.models import Q

from inventory.models.raw_item import RawItem


class StockAlert(models.Model):
    """
    Restock signal for a branch + raw item.

    At most one unresolved alert exists per branch + raw item; re-evaluation
    upgrades/downgrades its type instead of stacking duplicates.
    """

    class AlertType(models.TextChoices):
        LOW_STOCK = "low_stock", "Low Stock"
        OUT_OF_STOCK = "out_of_stock", "Out of Stock"

    branch_id = models.CharField(max_length=64)

    raw_item = models.ForeignKey(
        RawItem, on_delete=models.CASCADE, related_name="stock_alerts"
    )

    alert_type = models.CharField(max_length=20, choices=AlertType.choices)

    current_quantity = models.DecimalField(max_digits=16, decimal_places=4)
    threshold_quantity = models.DecimalField(max_digits=16, decimal_places=4)

    is_resolved = models.BooleanField(default=False)
    resolved_by = models.CharField(max_length=100, blank=True, default="")
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["branch_id", "is_resolved"], name="inv_alert_branch_resolved_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["branch_id", "raw_item"],
                condition=Q(is_resolved=False),
                name="uniq_open_stock_alert_per_branch_item",
            ),
        ]

    def __str__(self):
        return f"{self.alert_type} | {self.branch_id} | {self.raw_item_id}"
