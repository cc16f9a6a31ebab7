# recipes/models/recipe_line.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from inventory.models import RawItem
from recipes.models.menu_product import MenuProduct


class RecipeLine(models.Model):
    """
    One raw item consumed per single unit of a product.

    Deleted together with its product or raw item.
    """

    product = models.ForeignKey(
        MenuProduct,
        on_delete=models.CASCADE,
        related_name="recipe_lines",
    )

    raw_item = models.ForeignKey(
        RawItem,
        on_delete=models.CASCADE,
        related_name="recipe_lines",
    )

    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit = models.CharField(max_length=20, help_text="Recipe unit; converted to the stocking unit")
    note = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["product", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_recipe_line_quantity_positive",
            ),
        ]

    def __str__(self):
        return f"{self.product_id} <- {self.quantity} {self.unit} of {self.raw_item_id}"

    def clean(self):
        self.unit = (self.unit or "").strip().lower()
        if not self.unit:
            raise ValidationError("Recipe unit is required")
        if self.quantity is None or self.quantity <= Decimal("0"):
            raise ValidationError("Recipe quantity must be greater than zero")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
