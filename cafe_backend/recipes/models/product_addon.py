# recipes/models/product_addon.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from inventory.models import RawItem


class ProductAddon(models.Model):
    """
    Optional extra selectable on an order line (extra shot, oat milk).

    When raw_item is null the add-on has no inventory impact.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=150)

    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    raw_item = models.ForeignKey(
        RawItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="addons",
    )

    quantity_per_unit = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0.0000"),
        help_text="Raw item quantity consumed per selected add-on unit",
    )
    unit = models.CharField(max_length=20, blank=True, default="")

    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def consumes_inventory(self) -> bool:
        return self.raw_item_id is not None and self.quantity_per_unit > 0

    def clean(self):
        self.name = (self.name or "").strip()
        self.unit = (self.unit or "").strip().lower()
        if not self.name:
            raise ValidationError("Add-on name is required")
        if self.quantity_per_unit is not None and self.quantity_per_unit < 0:
            raise ValidationError("quantity_per_unit cannot be negative")
        if self.raw_item_id and not self.unit:
            raise ValidationError("unit is required when the add-on consumes a raw item")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
