# accounting/services/account_resolver.py

"""
======================================================
PATH: accounting/services/account_resolver.py
======================================================
ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account should be used for this purpose?"

Design goals:
- deterministic
- tenant-safe
- hard-fail on missing setup (so we don't post to wrong accounts)
"""

from __future__ import annotations

from accounting.models import Account, Expense
from accounting.services.chart_of_accounts import get_descendant_ids
from accounting.services.exceptions import AccountResolutionError

CASH = "CASH"
BANK = "BANK"
AR = "AR"
INVENTORY = "INVENTORY"
VAT_RECEIVABLE = "VAT_RECEIVABLE"
ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
VAT_PAYABLE = "VAT_PAYABLE"
RETAINED_EARNINGS = "RETAINED_EARNINGS"
SALES_REVENUE = "SALES_REVENUE"
COGS = "COGS"
WASTE = "WASTE"

SEMANTIC_ACCOUNT_NUMBERS = {
    CASH: "1111",
    BANK: "1112",
    AR: "1120",
    INVENTORY: "1130",
    VAT_RECEIVABLE: "1150",
    ACCOUNTS_PAYABLE: "2110",
    VAT_PAYABLE: "2120",
    RETAINED_EARNINGS: "3200",
    SALES_REVENUE: "4100",
    COGS: "5100",
    WASTE: "5270",
}

EXPENSE_CATEGORY_ACCOUNT_NUMBERS = {
    Expense.Category.SALARIES: "5210",
    Expense.Category.RENT: "5220",
    Expense.Category.UTILITIES: "5230",
    Expense.Category.MARKETING: "5240",
    Expense.Category.MAINTENANCE: "5250",
    Expense.Category.SUPPLIES: "5260",
    Expense.Category.WASTE: "5270",
    Expense.Category.OTHER: "5300",
}


def get_account_by_number(*, tenant_id: str, account_number: str) -> Account:
    try:
        return Account.objects.get(
            tenant_id=tenant_id,
            account_number=account_number,
            is_active=True,
        )
    except Account.DoesNotExist as exc:
        raise AccountResolutionError(
            f"Account {account_number} not found for tenant {tenant_id}. "
            "Seed the chart of accounts first."
        ) from exc


def get_account(*, tenant_id: str, semantic: str) -> Account:
    number = SEMANTIC_ACCOUNT_NUMBERS.get(semantic)
    if number is None:
        raise AccountResolutionError(f"Unknown semantic account: {semantic}")
    return get_account_by_number(tenant_id=tenant_id, account_number=number)


def get_payment_account(*, tenant_id: str, payment_method: str) -> Account:
    method = (payment_method or "cash").strip().lower()
    if method == "cash":
        return get_account(tenant_id=tenant_id, semantic=CASH)
    if method in ("bank", "card", "transfer"):
        return get_account(tenant_id=tenant_id, semantic=BANK)
    if method == "credit":
        return get_account(tenant_id=tenant_id, semantic=AR)
    raise AccountResolutionError(f"Unsupported payment method: {payment_method!r}")


def get_expense_account(*, tenant_id: str, category: str) -> Account:
    number = EXPENSE_CATEGORY_ACCOUNT_NUMBERS.get(category)
    if number is None:
        raise AccountResolutionError(f"Unknown expense category: {category!r}")
    return get_account_by_number(tenant_id=tenant_id, account_number=number)


def get_cogs_account_ids(*, tenant_id: str) -> list[int]:
    """COGS account and its descendants (used to split COGS in reports)."""
    root = (
        Account.objects.filter(tenant_id=tenant_id, account_number=SEMANTIC_ACCOUNT_NUMBERS[COGS])
        .only("id")
        .first()
    )
    if root is None:
        return []
    return get_descendant_ids(root)
