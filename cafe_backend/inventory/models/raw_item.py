# inventory/models/raw_item.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class RawItem(models.Model):
    """
    A consumable ingredient or packaging material tracked in inventory.

    Guarantees:
    - code is unique per tenant
    - unit is the stocking unit; stored lower-cased
    - unit_cost is per stocking unit (mutated on purchase receipt only)
    """

    class Category(models.TextChoices):
        INGREDIENT = "ingredient", "Ingredient"
        PACKAGING = "packaging", "Packaging"
        EQUIPMENT = "equipment", "Equipment"
        CONSUMABLE = "consumable", "Consumable"
        OTHER = "other", "Other"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    code = models.CharField(max_length=50)
    name = models.CharField(max_length=150)

    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.INGREDIENT,
    )

    unit = models.CharField(max_length=20, help_text="Stocking unit, e.g. g, kg, ml, l, pcs")

    unit_cost = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0.0000"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Cost per stocking unit",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "code"],
                name="uniq_raw_item_tenant_code",
            ),
            models.CheckConstraint(
                condition=Q(unit_cost__gte=0),
                name="chk_raw_item_unit_cost_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name} ({self.unit})"

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        self.unit = (self.unit or "").strip().lower()

        if not self.code:
            raise ValidationError("Raw item code is required")
        if not self.name:
            raise ValidationError("Raw item name is required")
        if not self.unit:
            raise ValidationError("Raw item unit is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
