# inventory/models/stock_movement.py

"""
BRANCH INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- delta is signed and non-zero
- new_quantity == previous_quantity + delta (validated)
- previous/new quantities are the values observed under the row lock
- one purchase movement per (branch, raw item, reference_id)
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from inventory.models.raw_item import RawItem


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        PURCHASE = "purchase", "Purchase Receipt"
        ADJUSTMENT = "adjustment", "Manual Adjustment"
        DEDUCTION = "deduction", "Order Deduction"
        TRANSFER = "transfer", "Branch Transfer"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    branch_id = models.CharField(max_length=64)

    raw_item = models.ForeignKey(
        RawItem, on_delete=models.CASCADE, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)

    delta = models.DecimalField(max_digits=16, decimal_places=4)
    previous_quantity = models.DecimalField(max_digits=16, decimal_places=4)
    new_quantity = models.DecimalField(max_digits=16, decimal_places=4)

    reference_id = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Order ID, purchase ID, transfer ID, etc.",
    )
    actor = models.CharField(max_length=100, blank=True, default="")
    note = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="inv_move_created_idx"),
            models.Index(fields=["movement_type"], name="inv_move_type_idx"),
            models.Index(fields=["branch_id", "raw_item", "created_at"], name="inv_move_branch_item_idx"),
            models.Index(fields=["reference_id"], name="inv_move_reference_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["branch_id", "raw_item", "reference_id"],
                condition=Q(movement_type="purchase") & ~Q(reference_id=""),
                name="uniq_purchase_movement_per_reference",
            ),
        ]

    def clean(self):
        if self.delta is None or self.delta == 0:
            raise ValidationError("delta must be non-zero")

        if self.previous_quantity is None or self.new_quantity is None:
            raise ValidationError("previous_quantity and new_quantity are required")

        if self.previous_quantity + self.delta != self.new_quantity:
            raise ValidationError("new_quantity must equal previous_quantity + delta")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        return f"{self.branch_id} | {self.movement_type} | {self.delta}"
