"""
======================================================
PATH: costing/migrations/0001_initial.py
======================================================
MIGRATION: CREATE OrderCosting

Purpose:
- One costing record per order_id (unique); retries replay the stored report
"""

from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="OrderCosting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(max_length=100, unique=True)),
                ("branch_id", models.CharField(max_length=64, db_index=True)),
                ("tenant_id", models.CharField(max_length=64, blank=True, default="", db_index=True)),
                (
                    "cost_of_goods",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                ("has_shortages", models.BooleanField(default=False)),
                ("report", models.JSONField(default=dict)),
                ("actor", models.CharField(max_length=100, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["branch_id", "created_at"], name="costing_branch_created_idx"),
                ],
            },
        ),
    ]
