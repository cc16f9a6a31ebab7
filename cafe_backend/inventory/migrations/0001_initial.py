"""
======================================================
PATH: inventory/migrations/0001_initial.py
======================================================
MIGRATION: CREATE INVENTORY TABLES

Purpose:
- RawItem catalog (code unique per tenant)
- BranchStock (one row per branch + raw item)
- Append-only StockMovement ledger (one purchase movement per reference)
- StockAlert (at most one open alert per branch + raw item)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RawItem",
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
                ("code", models.CharField(max_length=50)),
                ("name", models.CharField(max_length=150)),
                (
                    "category",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("ingredient", "Ingredient"),
                            ("packaging", "Packaging"),
                            ("equipment", "Equipment"),
                            ("consumable", "Consumable"),
                            ("other", "Other"),
                        ],
                        default="ingredient",
                    ),
                ),
                (
                    "unit",
                    models.CharField(max_length=20, help_text="Stocking unit, e.g. g, kg, ml, l, pcs"),
                ),
                (
                    "unit_cost",
                    models.DecimalField(
                        max_digits=14,
                        decimal_places=4,
                        default=Decimal("0.0000"),
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        help_text="Cost per stocking unit",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant_id", "code"],
                        name="uniq_raw_item_tenant_code",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(unit_cost__gte=0),
                        name="chk_raw_item_unit_cost_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BranchStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("branch_id", models.CharField(max_length=64, db_index=True)),
                (
                    "current_quantity",
                    models.DecimalField(max_digits=16, decimal_places=4, default=Decimal("0.0000")),
                ),
                (
                    "min_stock_level",
                    models.DecimalField(
                        max_digits=16,
                        decimal_places=4,
                        default=Decimal("0.0000"),
                        help_text="Restock threshold in the raw item's stocking unit",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "raw_item",
                    models.ForeignKey(
                        to="inventory.rawitem",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="branch_stocks",
                    ),
                ),
            ],
            options={
                "ordering": ["branch_id", "raw_item__name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["branch_id", "raw_item"],
                        name="uniq_branch_stock_branch_raw_item",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
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
                ("branch_id", models.CharField(max_length=64)),
                (
                    "movement_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("purchase", "Purchase Receipt"),
                            ("adjustment", "Manual Adjustment"),
                            ("deduction", "Order Deduction"),
                            ("transfer", "Branch Transfer"),
                        ],
                    ),
                ),
                ("delta", models.DecimalField(max_digits=16, decimal_places=4)),
                ("previous_quantity", models.DecimalField(max_digits=16, decimal_places=4)),
                ("new_quantity", models.DecimalField(max_digits=16, decimal_places=4)),
                (
                    "reference_id",
                    models.CharField(
                        max_length=100,
                        blank=True,
                        default="",
                        help_text="Order ID, purchase ID, transfer ID, etc.",
                    ),
                ),
                ("actor", models.CharField(max_length=100, blank=True, default="")),
                ("note", models.CharField(max_length=255, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "raw_item",
                    models.ForeignKey(
                        to="inventory.rawitem",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="inv_move_created_idx"),
                    models.Index(fields=["movement_type"], name="inv_move_type_idx"),
                    models.Index(fields=["branch_id", "raw_item", "created_at"], name="inv_move_branch_item_idx"),
                    models.Index(fields=["reference_id"], name="inv_move_reference_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["branch_id", "raw_item", "reference_id"],
                        condition=models.Q(movement_type="purchase") & ~models.Q(reference_id=""),
                        name="uniq_purchase_movement_per_reference",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockAlert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("branch_id", models.CharField(max_length=64)),
                (
                    "alert_type",
                    models.CharField(
                        max_length=20,
                        choices=[("low_stock", "Low Stock"), ("out_of_stock", "Out of Stock")],
                    ),
                ),
                ("current_quantity", models.DecimalField(max_digits=16, decimal_places=4)),
                ("threshold_quantity", models.DecimalField(max_digits=16, decimal_places=4)),
                ("is_resolved", models.BooleanField(default=False)),
                ("resolved_by", models.CharField(max_length=100, blank=True, default="")),
                ("resolved_at", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "raw_item",
                    models.ForeignKey(
                        to="inventory.rawitem",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_alerts",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["branch_id", "is_resolved"], name="inv_alert_branch_resolved_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["branch_id", "raw_item"],
                        condition=models.Q(is_resolved=False),
                        name="uniq_open_stock_alert_per_branch_item",
                    ),
                ],
            },
        ),
    ]
