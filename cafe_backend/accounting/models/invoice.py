# accounting/models/invoice.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from accounting.models.journal import JournalEntry


class Invoice(models.Model):
    """
    Customer invoice (accounts receivable subledger).

    Rules:
    - Totals are computed server-side from lines
    - 0 <= amount_paid <= total_amount (DB-enforced)
    - Status follows amount_paid once issued:
        amount_paid == total -> paid, 0 < amount_paid < total -> partially_paid
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ISSUED = "issued", "Issued"
        PARTIALLY_PAID = "partially_paid", "Partially Paid"
        PAID = "paid", "Paid"
        VOID = "void", "Void"

    PAYMENT_CASH = "cash"
    PAYMENT_BANK = "bank"
    PAYMENT_CREDIT = "credit"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_BANK, "Bank"),
        (PAYMENT_CREDIT, "Credit (Receivable)"),
    ]

    tenant_id = models.CharField(max_length=64, db_index=True)
    branch_id = models.CharField(max_length=64, blank=True, default="")

    invoice_number = models.CharField(max_length=30)

    customer_name = models.CharField(max_length=150)
    customer_tax_number = models.CharField(max_length=50, blank=True, default="")

    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    notes = models.CharField(max_length=255, blank=True, default="")
    created_by = models.CharField(max_length=100, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-issue_date", "-created_at"]
        indexes = [
            models.Index(fields=["tenant_id", "status"], name="acct_invoice_tenant_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "invoice_number"],
                name="uniq_invoice_tenant_number",
            ),
            models.CheckConstraint(
                condition=Q(amount_paid__gte=0) & Q(amount_paid__lte=F("total_amount")),
                name="chk_invoice_amount_paid_within_total",
            ),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.customer_name} ({self.status})"

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.amount_paid

    def clean(self):
        self.customer_name = (self.customer_name or "").strip()
        if not self.customer_name:
            raise ValidationError("customer_name is required")
        if self.amount_paid < 0:
            raise ValidationError("amount_paid cannot be negative")
        if self.amount_paid > self.total_amount:
            raise ValidationError("amount_paid cannot exceed total_amount")


class InvoiceLine(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="lines")

    description = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=4, default=Decimal("0.1500"))

    line_subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    line_discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    line_tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    line_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.description} x {self.quantity}"
