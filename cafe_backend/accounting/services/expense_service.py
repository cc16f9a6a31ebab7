# PATH: accounting/services/expense_service.py

"""
EXPENSE SERVICE (ACCOUNTS PAYABLE SUBLEDGER)

Responsibilities:
- Validate expense payload, allocate EXP-<year>-<seq> numbers
- approve: pending -> approved, posts the accrual (atomic + idempotent)
- pay:     approved -> paid, posts the settlement (atomic + idempotent)
- reject:  pending -> rejected (no ledger effect)

Accounting Effect:
- approve: Dr Expense account (+ Dr VAT Receivable) / Cr Accounts Payable
- pay:     Dr Accounts Payable / Cr Cash | Bank
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models import Expense
from accounting.services.exceptions import ExpenseError, ExpenseStateError
from accounting.services.posting import (
    post_expense_payment_to_ledger,
    post_expense_to_ledger,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
NUMBER_ATTEMPTS = 5


def _money(v) -> Decimal:
    try:
        return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ExpenseError(f"Invalid amount: {v!r}") from exc


def _next_expense_number(*, tenant_id: str, on: date) -> str:
    prefix = f"EXP-{on.year}-"
    last = (
        Expense.objects.filter(tenant_id=tenant_id, expense_number__startswith=prefix)
        .order_by("-expense_number")
        .values_list("expense_number", flat=True)
        .first()
    )
    seq = int(last[len(prefix):]) + 1 if last else 1
    return f"{prefix}{seq:06d}"


@transaction.atomic
def create_expense(
    *,
    tenant_id: str,
    category: str,
    description: str,
    amount,
    vat_amount=0,
    payment_method: str = Expense.PAYMENT_CASH,
    branch_id: str = "",
    vendor: str = "",
    expense_date: date | None = None,
    created_by: str = "",
) -> Expense:
    if category not in Expense.Category.values:
        raise ExpenseError(f"Invalid category: {category!r}")

    method = (payment_method or Expense.PAYMENT_CASH).strip().lower()
    if method not in dict(Expense.PAYMENT_METHODS):
        raise ExpenseError("Invalid payment_method. Use 'cash' or 'bank'.")

    net = _money(amount)
    vat = _money(vat_amount)
    if net <= 0:
        raise ExpenseError("Expense amount must be greater than zero")
    if vat < 0:
        raise ExpenseError("vat_amount cannot be negative")

    description = (description or "").strip()
    if not description:
        raise ExpenseError("Expense description is required")

    expense_date = expense_date or timezone.localdate()

    for _ in range(NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                return Expense.objects.create(
                    tenant_id=tenant_id,
                    branch_id=branch_id or "",
                    expense_number=_next_expense_number(tenant_id=tenant_id, on=expense_date),
                    category=category,
                    description=description[:255],
                    vendor=vendor or "",
                    expense_date=expense_date,
                    amount=net,
                    vat_amount=vat,
                    payment_method=method,
                    created_by=created_by or "",
                )
        except IntegrityError:
            continue

    raise ExpenseError("Could not allocate an expense number; retry")


@transaction.atomic
def approve_expense(*, expense: Expense, approved_by: str) -> Expense:
    locked = Expense.objects.select_for_update().get(pk=expense.pk)
    if locked.status != Expense.Status.PENDING:
        raise ExpenseStateError(f"Only pending expenses can be approved (status={locked.status})")

    entry = post_expense_to_ledger(expense=locked, posted_by=approved_by)

    locked.status = Expense.Status.APPROVED
    locked.journal_entry = entry
    locked.approved_by = approved_by or ""
    locked.approved_at = timezone.now()
    locked.save(update_fields=["status", "journal_entry", "approved_by", "approved_at"])

    logger.info("Expense approved", extra={"expense": locked.expense_number, "entry_id": entry.pk})
    return locked


@transaction.atomic
def pay_expense(*, expense: Expense, paid_by: str = "") -> Expense:
    locked = Expense.objects.select_for_update().get(pk=expense.pk)
    if locked.status != Expense.Status.APPROVED:
        raise ExpenseStateError(f"Only approved expenses can be paid (status={locked.status})")

    entry = post_expense_payment_to_ledger(expense=locked, posted_by=paid_by)

    locked.status = Expense.Status.PAID
    locked.payment_journal_entry = entry
    locked.paid_at = timezone.now()
    locked.save(update_fields=["status", "payment_journal_entry", "paid_at"])
    return locked


@transaction.atomic
def reject_expense(*, expense: Expense, rejected_by: str = "") -> Expense:
    locked = Expense.objects.select_for_update().get(pk=expense.pk)
    if locked.status != Expense.Status.PENDING:
        raise ExpenseStateError(f"Only pending expenses can be rejected (status={locked.status})")

    locked.status = Expense.Status.REJECTED
    locked.approved_by = rejected_by or ""
    locked.save(update_fields=["status", "approved_by"])
    return locked
