# accounting/models/expense.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.journal import JournalEntry


class Expense(models.Model):
    """
    Operating expense (accounts payable subledger).

    Lifecycle:
    - pending -> approved (journal posted: Dr expense [+ VAT], Cr payables)
    - approved -> paid    (journal posted: Dr payables, Cr cash/bank)
    - pending -> rejected (no ledger effect)

    Approved/paid expenses cannot be deleted.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending Approval"
        APPROVED = "approved", "Approved"
        PAID = "paid", "Paid"
        REJECTED = "rejected", "Rejected"

    class Category(models.TextChoices):
        SALARIES = "salaries", "Salaries & Wages"
        RENT = "rent", "Rent"
        UTILITIES = "utilities", "Utilities"
        MARKETING = "marketing", "Marketing & Advertising"
        MAINTENANCE = "maintenance", "Maintenance"
        SUPPLIES = "supplies", "Supplies"
        WASTE = "waste", "Waste & Spoilage"
        OTHER = "other", "Other"

    PAYMENT_CASH = "cash"
    PAYMENT_BANK = "bank"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_BANK, "Bank"),
    ]

    tenant_id = models.CharField(max_length=64, db_index=True)
    branch_id = models.CharField(max_length=64, blank=True, default="")

    expense_number = models.CharField(max_length=30)

    category = models.CharField(max_length=20, choices=Category.choices)
    description = models.CharField(max_length=255)
    vendor = models.CharField(max_length=150, blank=True, default="")

    expense_date = models.DateField(default=timezone.localdate)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Net amount before VAT",
    )
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHODS,
        default=PAYMENT_CASH,
    )

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="approved_expenses",
    )
    payment_journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="paid_expenses",
    )

    created_by = models.CharField(max_length=100, blank=True, default="")
    approved_by = models.CharField(max_length=100, blank=True, default="")
    approved_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        indexes = [
            models.Index(fields=["tenant_id", "status"], name="acct_expense_tenant_status_idx"),
            models.Index(fields=["expense_date"], name="acct_expense_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "expense_number"],
                name="uniq_expense_tenant_number",
            ),
            models.CheckConstraint(
                condition=Q(status__in=["pending", "rejected"]) | Q(journal_entry__isnull=False),
                name="chk_expense_approved_requires_journal",
            ),
        ]

    def __str__(self):
        return f"{self.expense_number} - {self.total_amount} ({self.status})"

    @property
    def total_amount(self) -> Decimal:
        return (self.amount or Decimal("0.00")) + (self.vat_amount or Decimal("0.00"))

    def clean(self):
        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Expense description is required")
        if self.vat_amount is not None and self.vat_amount < 0:
            raise ValidationError("vat_amount cannot be negative")

    def delete(self, *args, **kwargs):
        if self.pk and type(self).objects.filter(
            pk=self.pk, status__in=[self.Status.APPROVED, self.Status.PAID]
        ).exists():
            raise ValidationError("Approved expenses cannot be deleted")
        return super().delete(*args, **kwargs)
