"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: CREATE LEDGER TABLES

Purpose:
- Account (chart of accounts, number unique per tenant)
- JournalEntry + JournalLine (double-entry ledger; one live entry per
  business reference, one-sided lines)
- Invoice + InvoiceLine (receivables) and Expense (payables)
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64, db_index=True)),
                ("account_number", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                    ),
                ),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                (
                    "is_system",
                    models.BooleanField(
                        default=False,
                        help_text="Referenced by automatic postings; cannot be deactivated",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        to="accounting.account",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="children",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["tenant_id", "account_number"],
                "indexes": [
                    models.Index(fields=["tenant_id", "account_type"], name="acct_tenant_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant_id", "account_number"],
                        name="uniq_account_tenant_number",
                    ),
                    models.CheckConstraint(
                        condition=~models.Q(account_number=""),
                        name="chk_account_number_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=~models.Q(name=""),
                        name="chk_account_name_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64, db_index=True)),
                (
                    "entry_date",
                    models.DateField(
                        default=django.utils.timezone.localdate,
                        help_text="Accounting effective date",
                    ),
                ),
                (
                    "description",
                    models.TextField(help_text="Narrative description of the journal entry"),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=10,
                        choices=[("draft", "Draft"), ("posted", "Posted"), ("void", "Void")],
                        default="draft",
                    ),
                ),
                (
                    "reference_type",
                    models.CharField(
                        max_length=50,
                        blank=True,
                        default="",
                        help_text="Business event type (order_cogs, invoice, expense, ...)",
                    ),
                ),
                (
                    "reference_id",
                    models.CharField(
                        max_length=100,
                        blank=True,
                        default="",
                        help_text="Business event id (order id, invoice id, ...)",
                    ),
                ),
                ("created_by", models.CharField(max_length=100, blank=True, default="")),
                ("posted_by", models.CharField(max_length=100, blank=True, default="")),
                ("posted_at", models.DateTimeField(null=True, blank=True)),
                ("voided_by", models.CharField(max_length=100, blank=True, default="")),
                ("voided_at", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "reversal_of",
                    models.ForeignKey(
                        to="accounting.journalentry",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="reversals",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-entry_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["tenant_id", "status", "entry_date"], name="acct_je_tenant_status_date_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="acct_je_reference_idx"),
                    models.Index(fields=["created_at"], name="acct_je_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant_id", "reference_type", "reference_id"],
                        condition=~models.Q(status="void") & ~models.Q(reference_type="") & ~models.Q(reference_id=""),
                        name="uniq_live_journal_reference",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(status="draft")
                        | models.Q(status="void")
                        | models.Q(posted_at__isnull=False),
                        name="chk_posted_journal_has_posted_at",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("debit", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("credit", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                ("branch_id", models.CharField(max_length=64, blank=True, default="", db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        to="accounting.account",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                    ),
                ),
                (
                    "entry",
                    models.ForeignKey(
                        to="accounting.journalentry",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lines",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Line",
                "verbose_name_plural": "Journal Lines",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["account"], name="acct_jl_account_idx"),
                    models.Index(fields=["entry"], name="acct_jl_entry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(models.Q(debit__gt=0) & models.Q(credit=0))
                        | (models.Q(debit=0) & models.Q(credit__gt=0)),
                        name="chk_journal_line_one_sided",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64, db_index=True)),
                ("branch_id", models.CharField(max_length=64, blank=True, default="")),
                ("invoice_number", models.CharField(max_length=30)),
                ("customer_name", models.CharField(max_length=150)),
                ("customer_tax_number", models.CharField(max_length=50, blank=True, default="")),
                ("issue_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(null=True, blank=True)),
                ("subtotal", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("discount_amount", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("tax_amount", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("total_amount", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("amount_paid", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("draft", "Draft"),
                            ("issued", "Issued"),
                            ("partially_paid", "Partially Paid"),
                            ("paid", "Paid"),
                            ("void", "Void"),
                        ],
                        default="draft",
                    ),
                ),
                ("notes", models.CharField(max_length=255, blank=True, default="")),
                ("created_by", models.CharField(max_length=100, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "journal_entry",
                    models.ForeignKey(
                        to="accounting.journalentry",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="invoices",
                    ),
                ),
            ],
            options={
                "ordering": ["-issue_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["tenant_id", "status"], name="acct_invoice_tenant_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant_id", "invoice_number"],
                        name="uniq_invoice_tenant_number",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(amount_paid__gte=0) & models.Q(amount_paid__lte=models.F("total_amount")),
                        name="chk_invoice_amount_paid_within_total",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.CharField(max_length=255)),
                ("quantity", models.DecimalField(max_digits=12, decimal_places=3)),
                ("unit_price", models.DecimalField(max_digits=14, decimal_places=2)),
                ("discount_percent", models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))),
                ("tax_rate", models.DecimalField(max_digits=5, decimal_places=4, default=Decimal("0.1500"))),
                ("line_subtotal", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("line_discount", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("line_tax", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("line_total", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                (
                    "invoice",
                    models.ForeignKey(
                        to="accounting.invoice",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tenant_id", models.CharField(max_length=64, db_index=True)),
                ("branch_id", models.CharField(max_length=64, blank=True, default="")),
                ("expense_number", models.CharField(max_length=30)),
                (
                    "category",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("salaries", "Salaries & Wages"),
                            ("rent", "Rent"),
                            ("utilities", "Utilities"),
                            ("marketing", "Marketing & Advertising"),
                            ("maintenance", "Maintenance"),
                            ("supplies", "Supplies"),
                            ("waste", "Waste & Spoilage"),
                            ("other", "Other"),
                        ],
                    ),
                ),
                ("description", models.CharField(max_length=255)),
                ("vendor", models.CharField(max_length=150, blank=True, default="")),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "amount",
                    models.DecimalField(
                        max_digits=14,
                        decimal_places=2,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                        help_text="Net amount before VAT",
                    ),
                ),
                ("vat_amount", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                (
                    "payment_method",
                    models.CharField(
                        max_length=10,
                        choices=[("cash", "Cash"), ("bank", "Bank")],
                        default="cash",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("pending", "Pending Approval"),
                            ("approved", "Approved"),
                            ("paid", "Paid"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                    ),
                ),
                ("created_by", models.CharField(max_length=100, blank=True, default="")),
                ("approved_by", models.CharField(max_length=100, blank=True, default="")),
                ("approved_at", models.DateTimeField(null=True, blank=True)),
                ("paid_at", models.DateTimeField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "journal_entry",
                    models.ForeignKey(
                        to="accounting.journalentry",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="approved_expenses",
                    ),
                ),
                (
                    "payment_journal_entry",
                    models.ForeignKey(
                        to="accounting.journalentry",
                        on_delete=django.db.models.deletion.PROTECT,
                        null=True,
                        blank=True,
                        related_name="paid_expenses",
                    ),
                ),
            ],
            options={
                "verbose_name": "Expense",
                "verbose_name_plural": "Expenses",
                "ordering": ["-expense_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["tenant_id", "status"], name="acct_expense_tenant_status_idx"),
                    models.Index(fields=["expense_date"], name="acct_expense_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant_id", "expense_number"],
                        name="uniq_expense_tenant_number",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(status__in=["pending", "rejected"]) | models.Q(journal_entry__isnull=False),
                        name="chk_expense_approved_requires_journal",
                    ),
                ],
            },
        ),
    ]
