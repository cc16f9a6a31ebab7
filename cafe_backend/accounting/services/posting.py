# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Build lines and call post_if_absent (the engine).

This module should remain a thin adapter:
- It DOES NOT do workflows (orchestrators / subledger services do).
- It DOES map business events -> accounting lines.
- It ALWAYS goes through post_if_absent for immutability + idempotency.

Reference keys (one live entry per key per tenant):
- order_cogs:<order_id>          Dr COGS            / Cr Inventory
- order_sale:<order_id>          Dr Cash|Bank|AR    / Cr Sales, Cr VAT Payable
- purchase_receipt:<receipt_id>  Dr Inventory       / Cr Accounts Payable|Cash|Bank
- invoice:<invoice_id>           Dr Accounts Receivable / Cr Sales, Cr VAT Payable
- invoice_payment:<id>:<paid>    Dr Cash|Bank       / Cr Accounts Receivable
- expense:<expense_id>           Dr Expense (+ VAT Receivable) / Cr Accounts Payable
- expense_payment:<expense_id>   Dr Accounts Payable / Cr Cash|Bank
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from accounting.models import Expense, Invoice, JournalEntry
from accounting.services import account_resolver as ar
from accounting.services.exceptions import AccountResolutionError, JournalEntryCreationError
from accounting.services.journal_entry_service import post_if_absent

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _default_vat_rate() -> Decimal:
    return Decimal(str(getattr(settings, "CAFE_VAT_RATE", "0.15")))


def split_vat_inclusive(total, *, vat_rate=None) -> tuple[Decimal, Decimal]:
    """
    Split a VAT-inclusive total into (net, vat).
    split_vat_inclusive(115) -> (100.00, 15.00) at 15%
    """
    gross = _money(total)
    rate = Decimal(str(vat_rate)) if vat_rate is not None else _default_vat_rate()
    vat = _money(gross * rate / (Decimal("1") + rate))
    return _money(gross - vat), vat


def _settlement_account(*, tenant_id: str, payment_method: str):
    method = (payment_method or "cash").strip().lower()
    if method == "credit":
        return ar.get_account(tenant_id=tenant_id, semantic=ar.ACCOUNTS_PAYABLE)
    return ar.get_payment_account(tenant_id=tenant_id, payment_method=method)


# ============================================================
# ORDERS
# ============================================================


def post_order_cogs_to_ledger(
    *,
    tenant_id: str,
    order_id: str,
    branch_id: str,
    amount,
    posted_by: str = "",
    entry_date: date | None = None,
) -> JournalEntry | None:
    cogs = _money(amount)

    def build():
        if cogs <= 0:
            return None
        return {
            "description": f"Cost of goods sold for order {order_id}",
            "entry_date": entry_date,
            "branch_id": branch_id,
            "lines": [
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.COGS), "debit": cogs},
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.INVENTORY), "credit": cogs},
            ],
        }

    return post_if_absent(
        tenant_id=tenant_id,
        reference_type="order_cogs",
        reference_id=str(order_id),
        builder=build,
        posted_by=posted_by,
    )


def post_order_sale_to_ledger(
    *,
    tenant_id: str,
    order_id: str,
    branch_id: str,
    total_amount,
    vat_amount=None,
    payment_method: str = "cash",
    posted_by: str = "",
    entry_date: date | None = None,
) -> JournalEntry | None:
    """
    Revenue recognition for a completed order.
    vat_amount=None -> total_amount is VAT-inclusive at CAFE_VAT_RATE.
    """
    gross = _money(total_amount)
    if vat_amount is None:
        net, vat = split_vat_inclusive(gross)
    else:
        vat = _money(vat_amount)
        net = _money(gross - vat)

    if net < 0 or vat < 0:
        raise JournalEntryCreationError("VAT cannot exceed the order total")

    def build():
        if gross <= 0:
            return None
        lines = [
            {
                "account": ar.get_payment_account(tenant_id=tenant_id, payment_method=payment_method),
                "debit": gross,
            },
        ]
        if net > 0:
            lines.append(
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.SALES_REVENUE), "credit": net}
            )
        if vat > 0:
            lines.append(
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.VAT_PAYABLE), "credit": vat}
            )
        return {
            "description": f"Sale for order {order_id}",
            "entry_date": entry_date,
            "branch_id": branch_id,
            "lines": lines,
        }

    return post_if_absent(
        tenant_id=tenant_id,
        reference_type="order_sale",
        reference_id=str(order_id),
        builder=build,
        posted_by=posted_by,
    )


# ============================================================
# PURCHASES
# ============================================================


def post_purchase_receipt_to_ledger(
    *,
    tenant_id: str,
    reference_id: str,
    branch_id: str,
    amount,
    payment_method: str = "credit",
    posted_by: str = "",
) -> JournalEntry | None:
    total = _money(amount)

    def build():
        if total <= 0:
            return None
        return {
            "description": f"Inventory purchase receipt {reference_id}",
            "branch_id": branch_id,
            "lines": [
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.INVENTORY), "debit": total},
                {
                    "account": _settlement_account(tenant_id=tenant_id, payment_method=payment_method),
                    "credit": total,
                },
            ],
        }

    return post_if_absent(
        tenant_id=tenant_id,
        reference_type="purchase_receipt",
        reference_id=str(reference_id),
        builder=build,
        posted_by=posted_by,
    )


# ============================================================
# INVOICES
# ============================================================


def post_invoice_to_ledger(*, invoice: Invoice, posted_by: str = "") -> JournalEntry | None:
    tenant_id = invoice.tenant_id
    revenue = _money(invoice.subtotal - invoice.discount_amount)
    tax = _money(invoice.tax_amount)
    total = _money(invoice.total_amount)

    def build():
        if total <= 0:
            return None
        lines = [{"account": ar.get_account(tenant_id=tenant_id, semantic=ar.AR), "debit": total}]
        if revenue > 0:
            lines.append(
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.SALES_REVENUE), "credit": revenue}
            )
        if tax > 0:
            lines.append(
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.VAT_PAYABLE), "credit": tax}
            )
        return {
            "description": f"Invoice {invoice.invoice_number} - {invoice.customer_name}",
            "entry_date": invoice.issue_date,
            "branch_id": invoice.branch_id,
            "lines": lines,
        }

    return post_if_absent(
        tenant_id=tenant_id,
        reference_type="invoice",
        reference_id=str(invoice.pk),
        builder=build,
        posted_by=posted_by,
    )


def post_invoice_payment_to_ledger(
    *,
    invoice: Invoice,
    amount,
    new_amount_paid,
    payment_method: str = "cash",
    posted_by: str = "",
) -> JournalEntry | None:
    received = _money(amount)
    method = (payment_method or "cash").strip().lower()
    if method == "credit":
        raise AccountResolutionError("Invoice payments must be received in cash or bank")

    def build():
        if received <= 0:
            return None
        return {
            "description": f"Payment received for invoice {invoice.invoice_number}",
            "branch_id": invoice.branch_id,
            "lines": [
                {
                    "account": ar.get_payment_account(tenant_id=invoice.tenant_id, payment_method=method),
                    "debit": received,
                },
                {"account": ar.get_account(tenant_id=invoice.tenant_id, semantic=ar.AR), "credit": received},
            ],
        }

    return post_if_absent(
        tenant_id=invoice.tenant_id,
        reference_type="invoice_payment",
        reference_id=f"{invoice.pk}:{_money(new_amount_paid)}",
        builder=build,
        posted_by=posted_by,
    )


# ============================================================
# EXPENSES
# ============================================================


def post_expense_to_ledger(*, expense: Expense, posted_by: str = "") -> JournalEntry | None:
    tenant_id = expense.tenant_id
    net = _money(expense.amount)
    vat = _money(expense.vat_amount)

    def build():
        lines = [
            {
                "account": ar.get_expense_account(tenant_id=tenant_id, category=expense.category),
                "debit": net,
            }
        ]
        if vat > 0:
            lines.append(
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.VAT_RECEIVABLE), "debit": vat}
            )
        lines.append(
            {
                "account": ar.get_account(tenant_id=tenant_id, semantic=ar.ACCOUNTS_PAYABLE),
                "credit": _money(net + vat),
            }
        )
        return {
            "description": f"Expense {expense.expense_number}: {expense.description}",
            "entry_date": expense.expense_date,
            "branch_id": expense.branch_id,
            "lines": lines,
        }

    return post_if_absent(
        tenant_id=tenant_id,
        reference_type="expense",
        reference_id=str(expense.pk),
        builder=build,
        posted_by=posted_by,
    )


def post_expense_payment_to_ledger(*, expense: Expense, posted_by: str = "") -> JournalEntry | None:
    tenant_id = expense.tenant_id
    total = _money(expense.total_amount)

    def build():
        return {
            "description": f"Payment of expense {expense.expense_number}",
            "branch_id": expense.branch_id,
            "lines": [
                {"account": ar.get_account(tenant_id=tenant_id, semantic=ar.ACCOUNTS_PAYABLE), "debit": total},
                {
                    "account": ar.get_payment_account(tenant_id=tenant_id, payment_method=expense.payment_method),
                    "credit": total,
                },
            ],
        }

    return post_if_absent(
        tenant_id=tenant_id,
        reference_type="expense_payment",
        reference_id=str(expense.pk),
        builder=build,
        posted_by=posted_by,
    )
