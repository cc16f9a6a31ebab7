"""
======================================================
PATH: recipes/migrations/0001_initial.py
======================================================
MIGRATION: CREATE RECIPE TABLES

Purpose:
- MenuProduct (sellable item per tenant)
- RecipeLine (raw item consumed per unit of a product; quantity > 0)
- ProductAddon (optional extra, may have no inventory impact)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MenuProduct",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("tenant_id", models.CharField(max_length=64, db_index=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "price",
                    models.DecimalField(
                        max_digits=12,
                        decimal_places=2,
                        default=Decimal("0.00"),
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="RecipeLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(max_digits=14, decimal_places=4)),
                (
                    "unit",
                    models.CharField(max_length=20, help_text="Recipe unit; converted to the stocking unit"),
                ),
                ("note", models.CharField(max_length=255, blank=True, default="")),
                (
                    "product",
                    models.ForeignKey(
                        to="recipes.menuproduct",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipe_lines",
                    ),
                ),
                (
                    "raw_item",
                    models.ForeignKey(
                        to="inventory.rawitem",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="recipe_lines",
                    ),
                ),
            ],
            options={
                "ordering": ["product", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gt=0),
                        name="chk_recipe_line_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductAddon",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("tenant_id", models.CharField(max_length=64, db_index=True)),
                ("name", models.CharField(max_length=150)),
                ("price", models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))),
                (
                    "quantity_per_unit",
                    models.DecimalField(
                        max_digits=14,
                        decimal_places=4,
                        default=Decimal("0.0000"),
                        help_text="Raw item quantity consumed per selected add-on unit",
                    ),
                ),
                ("unit", models.CharField(max_length=20, blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                (
                    "raw_item",
                    models.ForeignKey(
                        to="inventory.rawitem",
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                        blank=True,
                        related_name="addons",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
