# accounting/services/chart_of_accounts.py

"""
======================================================
PATH: accounting/services/chart_of_accounts.py
======================================================
CHART OF ACCOUNTS SERVICE

- create_account(): validated creation (unique number per tenant,
  parent of the same tenant + type)
- seed_default_chart(): idempotent per tenant (get_or_create by number)
- get_account_tree(): nested structure for UIs
- get_account_balance(): derived LIVE from posted lines; a parent's balance
  includes every descendant
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from accounting.models import Account, JournalEntry, JournalLine
from accounting.services.exceptions import ChartOfAccountsError

TWOPLACES = Decimal("0.01")

# (number, name, type, parent number, is_system)
DEFAULT_CHART: list[tuple[str, str, str, str | None, bool]] = [
    # Assets
    ("1000", "Assets", Account.ASSET, None, False),
    ("1100", "Current Assets", Account.ASSET, "1000", False),
    ("1110", "Cash", Account.ASSET, "1100", False),
    ("1111", "Petty Cash", Account.ASSET, "1110", True),
    ("1112", "Bank", Account.ASSET, "1110", True),
    ("1120", "Accounts Receivable", Account.ASSET, "1100", True),
    ("1130", "Inventory", Account.ASSET, "1100", True),
    ("1140", "Prepaid Expenses", Account.ASSET, "1100", False),
    ("1150", "VAT Receivable", Account.ASSET, "1100", True),
    ("1200", "Fixed Assets", Account.ASSET, "1000", False),
    ("1210", "Equipment", Account.ASSET, "1200", False),
    ("1220", "Furniture", Account.ASSET, "1200", False),
    # Liabilities
    ("2000", "Liabilities", Account.LIABILITY, None, False),
    ("2100", "Current Liabilities", Account.LIABILITY, "2000", False),
    ("2110", "Accounts Payable", Account.LIABILITY, "2100", True),
    ("2120", "VAT Payable", Account.LIABILITY, "2100", True),
    ("2130", "Salaries Payable", Account.LIABILITY, "2100", False),
    ("2200", "Long-term Liabilities", Account.LIABILITY, "2000", False),
    ("2210", "Loans", Account.LIABILITY, "2200", False),
    # Equity
    ("3000", "Equity", Account.EQUITY, None, False),
    ("3100", "Capital", Account.EQUITY, "3000", True),
    ("3200", "Retained Earnings", Account.EQUITY, "3000", True),
    # Revenue
    ("4000", "Revenue", Account.REVENUE, None, False),
    ("4100", "Sales Revenue", Account.REVENUE, "4000", True),
    ("4110", "Beverage Sales", Account.REVENUE, "4100", False),
    ("4120", "Food Sales", Account.REVENUE, "4100", False),
    ("4200", "Other Revenue", Account.REVENUE, "4000", False),
    ("4210", "Delivery Fees", Account.REVENUE, "4200", False),
    # Expenses
    ("5000", "Expenses", Account.EXPENSE, None, False),
    ("5100", "Cost of Goods Sold", Account.EXPENSE, "5000", True),
    ("5200", "Operating Expenses", Account.EXPENSE, "5000", False),
    ("5210", "Salaries & Wages", Account.EXPENSE, "5200", False),
    ("5220", "Rent", Account.EXPENSE, "5200", False),
    ("5230", "Utilities", Account.EXPENSE, "5200", False),
    ("5240", "Marketing & Advertising", Account.EXPENSE, "5200", False),
    ("5250", "Maintenance", Account.EXPENSE, "5200", False),
    ("5260", "Supplies", Account.EXPENSE, "5200", False),
    ("5270", "Waste & Spoilage", Account.EXPENSE, "5200", True),
    ("5300", "Other Expenses", Account.EXPENSE, "5000", False),
]


def _q2(amount: Decimal) -> Decimal:
    return (amount or Decimal("0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def create_account(
    *,
    tenant_id: str,
    account_number: str,
    name: str,
    account_type: str,
    parent: Account | None = None,
    description: str = "",
    is_system: bool = False,
) -> Account:
    if account_type not in dict(Account.ACCOUNT_TYPES):
        raise ChartOfAccountsError(f"Invalid account_type: {account_type!r}")

    account = Account(
        tenant_id=tenant_id,
        account_number=account_number,
        name=name,
        account_type=account_type,
        parent=parent,
        description=description,
        is_system=is_system,
    )
    try:
        account.save()
    except ValidationError as exc:
        raise ChartOfAccountsError("; ".join(exc.messages)) from exc
    return account


@transaction.atomic
def seed_default_chart(*, tenant_id: str) -> dict:
    """
    Create the default cafe chart for a tenant. Safe to run repeatedly:
    existing accounts (matched by number) are left untouched.
    """
    tenant_id = (tenant_id or "").strip()
    if not tenant_id:
        raise ChartOfAccountsError("tenant_id is required")

    by_number: dict[str, Account] = {}
    created = 0

    for number, name, account_type, parent_number, is_system in DEFAULT_CHART:
        account, was_created = Account.objects.get_or_create(
            tenant_id=tenant_id,
            account_number=number,
            defaults={
                "name": name,
                "account_type": account_type,
                "parent": by_number.get(parent_number) if parent_number else None,
                "is_system": is_system,
            },
        )
        by_number[number] = account
        created += int(was_created)

    return {"tenant_id": tenant_id, "created": created, "total": len(DEFAULT_CHART)}


def get_account_tree(*, tenant_id: str, include_inactive: bool = False) -> list[dict]:
    qs = Account.objects.filter(tenant_id=tenant_id)
    if not include_inactive:
        qs = qs.filter(is_active=True)

    nodes: dict[int, dict] = {}
    accounts = list(qs.order_by("account_number"))
    for acc in accounts:
        nodes[acc.id] = {
            "id": acc.id,
            "account_number": acc.account_number,
            "name": acc.name,
            "account_type": acc.account_type,
            "normal_balance": acc.normal_balance,
            "is_system": acc.is_system,
            "children": [],
        }

    roots = []
    for acc in accounts:
        node = nodes[acc.id]
        parent_node = nodes.get(acc.parent_id) if acc.parent_id else None
        if parent_node is None:
            roots.append(node)
        else:
            parent_node["children"].append(node)
    return roots


def get_descendant_ids(account: Account) -> list[int]:
    """Account id plus every descendant id (breadth-first)."""
    ids = [account.id]
    frontier = [account.id]
    while frontier:
        frontier = list(
            Account.objects.filter(parent_id__in=frontier).values_list("id", flat=True)
        )
        ids.extend(frontier)
    return ids


def get_account_balance(
    account: Account,
    *,
    as_of: date | None = None,
    include_descendants: bool = True,
    branch_id: str | None = None,
) -> Decimal:
    """
    Balance rule:
    - Assets & Expenses → Debit balance  (debits - credits)
    - Liabilities, Equity & Revenue → Credit balance (credits - debits)
    """
    if account is None:
        raise ChartOfAccountsError("Account is required")

    ids = get_descendant_ids(account) if include_descendants else [account.id]

    q = Q(account_id__in=ids, entry__status=JournalEntry.Status.POSTED)
    if as_of is not None:
        q &= Q(entry__entry_date__lte=as_of)
    if branch_id:
        q &= Q(branch_id=branch_id)

    totals = JournalLine.objects.filter(q).aggregate(
        debit=Coalesce(Sum("debit"), Decimal("0.00")),
        credit=Coalesce(Sum("credit"), Decimal("0.00")),
    )

    debit = _q2(totals["debit"])
    credit = _q2(totals["credit"])

    if account.account_type in Account.DEBIT_NORMAL_TYPES:
        return _q2(debit - credit)
    return _q2(credit - debit)
