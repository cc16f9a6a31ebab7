# accounting/services/balance_service.py

"""
BALANCE & REPORTING HELPERS (AUTHORITATIVE)

Read-only ledger aggregation shared by every financial report.

RULES:
- READ-ONLY: no writes, ever
- JournalLine of a POSTED entry is the single source of truth
  (draft and void entries never count)
- Accounting timeline uses JournalEntry.entry_date
- One aggregate query per report section, so a report reads one
  consistent snapshot even while postings run concurrently
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from accounting.models import Account, JournalEntry, JournalLine
from accounting.services.exceptions import AccountingServiceError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_major_number(amount: Decimal) -> float:
    return float(_q2(amount))


def to_minor_int(amount: Decimal) -> int:
    return int((_q2(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def money_fields(name: str, amount: Decimal) -> dict:
    """{"<name>": 12.5, "<name>_minor": 1250}"""
    return {name: to_major_number(amount), f"{name}_minor": to_minor_int(amount)}


def parse_date(value, *, field: str = "date") -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise AccountingServiceError(f"Invalid {field} format (YYYY-MM-DD)") from exc


def signed_balance(account_type: str, debit: Decimal, credit: Decimal) -> Decimal:
    """
    Balance rule:
    - Assets & Expenses → Debit balance  (debits - credits)
    - Liabilities, Equity & Revenue → Credit balance (credits - debits)
    """
    if account_type in Account.DEBIT_NORMAL_TYPES:
        return _q2(debit - credit)
    return _q2(credit - debit)


@dataclass(frozen=True)
class AccountTotals:
    account_id: int
    account_number: str
    name: str
    account_type: str
    debit: Decimal
    credit: Decimal

    @property
    def balance(self) -> Decimal:
        return signed_balance(self.account_type, self.debit, self.credit)


def posted_line_filter(
    *,
    tenant_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    branch_id: str | None = None,
) -> Q:
    q = Q(entry__tenant_id=tenant_id, entry__status=JournalEntry.Status.POSTED)
    if start_date is not None:
        q &= Q(entry__entry_date__gte=start_date)
    if end_date is not None:
        q &= Q(entry__entry_date__lte=end_date)
    if branch_id:
        q &= Q(branch_id=branch_id)
    return q


def posted_totals_by_account(
    *,
    tenant_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    branch_id: str | None = None,
    account_types: tuple[str, ...] | None = None,
) -> list[AccountTotals]:
    """
    Σdebit / Σcredit per account over posted lines, in ONE grouped query.

    Inactive accounts are included: deactivating an account must never make
    historical postings disappear from the ledger totals.
    Accounts without activity are omitted.
    """
    q = posted_line_filter(
        tenant_id=tenant_id,
        start_date=start_date,
        end_date=end_date,
        branch_id=branch_id,
    )
    if account_types:
        q &= Q(account__account_type__in=account_types)

    rows = (
        JournalLine.objects.filter(q)
        .values(
            "account_id",
            "account__account_number",
            "account__name",
            "account__account_type",
        )
        .annotate(
            debit_total=Coalesce(Sum("debit"), ZERO),
            credit_total=Coalesce(Sum("credit"), ZERO),
        )
        .order_by("account__account_number")
    )

    return [
        AccountTotals(
            account_id=r["account_id"],
            account_number=r["account__account_number"],
            name=r["account__name"],
            account_type=r["account__account_type"],
            debit=_q2(r["debit_total"]),
            credit=_q2(r["credit_total"]),
        )
        for r in rows
    ]


def account_row(totals: AccountTotals, *, amount: Decimal | None = None, key: str = "balance") -> dict:
    value = totals.balance if amount is None else amount
    return {
        "account_id": totals.account_id,
        "account_number": totals.account_number,
        "account_name": totals.name,
        **money_fields(key, value),
    }
