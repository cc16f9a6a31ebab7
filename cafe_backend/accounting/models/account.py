# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    Represents a single account in a tenant's Chart of Accounts.

    Guarantees:
    - Account numbers are unique per tenant
    - Number + name are normalized (trimmed)
    - A parent belongs to the same tenant, has the same type, and the
      parent chain never loops back to the account itself
    - Balances are NOT stored here; they are derived from posted lines
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT_NORMAL_TYPES = (ASSET, EXPENSE)

    tenant_id = models.CharField(max_length=64, db_index=True)

    account_number = models.CharField(max_length=20)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    is_active = models.BooleanField(default=True)
    is_system = models.BooleanField(
        default=False,
        help_text="Referenced by automatic postings; cannot be deactivated",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["tenant_id", "account_number"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["tenant_id", "account_type"], name="acct_tenant_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "account_number"],
                name="uniq_account_tenant_number",
            ),
            models.CheckConstraint(
                condition=~Q(account_number=""),
                name="chk_account_number_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.account_number} - {self.name}"

    @property
    def normal_balance(self) -> str:
        return "debit" if self.account_type in self.DEBIT_NORMAL_TYPES else "credit"

    @property
    def level(self) -> int:
        depth, node = 1, self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def clean(self):
        self.tenant_id = (self.tenant_id or "").strip()
        self.account_number = (self.account_number or "").strip()
        self.name = (self.name or "").strip()

        if not self.tenant_id:
            raise ValidationError("tenant_id is required")
        if not self.account_number:
            raise ValidationError("Account number is required")
        if not self.name:
            raise ValidationError("Account name is required")

        if self.is_system and not self.is_active:
            raise ValidationError("System accounts cannot be deactivated")

        if self.parent_id is None:
            return

        parent = self.parent
        if parent.tenant_id != self.tenant_id:
            raise ValidationError("Parent account must belong to the same tenant")
        if parent.account_type != self.account_type:
            raise ValidationError("Parent account must have the same account type")

        node = parent
        while node is not None:
            if self.pk is not None and node.pk == self.pk:
                raise ValidationError("Account hierarchy cannot contain cycles")
            node = node.parent

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
