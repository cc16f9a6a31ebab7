# accounting/services/income_statement_service.py

"""
INCOME STATEMENT SERVICE (PROFIT & LOSS)

Read-only aggregation over posted journal lines.

Layout:
    Revenue                      (credit-normal, by account)
  - Cost of Goods Sold           (5100 and descendants)
  = Gross Profit
  - Operating Expenses           (every other expense account)
  = Net Income

Key rules:
- Uses JournalEntry.entry_date as the accounting effective date
- Period bounds are inclusive
- Optional branch filter works on JournalLine.branch_id
"""

from __future__ import annotations

from decimal import Decimal

from accounting.models import Account
from accounting.services.account_resolver import get_cogs_account_ids
from accounting.services.balance_service import (
    _q2,
    account_row,
    money_fields,
    parse_date,
    posted_totals_by_account,
)
from accounting.services.exceptions import AccountingServiceError


def get_income_statement(
    *,
    tenant_id: str,
    start_date=None,
    end_date=None,
    branch_id: str | None = None,
) -> dict:
    start = parse_date(start_date, field="start_date")
    end = parse_date(end_date, field="end_date")
    if start and end and start > end:
        raise AccountingServiceError("start_date must be on or before end_date")

    cogs_ids = set(get_cogs_account_ids(tenant_id=tenant_id))

    totals = posted_totals_by_account(
        tenant_id=tenant_id,
        start_date=start,
        end_date=end,
        branch_id=branch_id,
        account_types=(Account.REVENUE, Account.EXPENSE),
    )

    revenue_rows, cogs_rows, opex_rows = [], [], []
    revenue = Decimal("0.00")
    cogs = Decimal("0.00")
    opex = Decimal("0.00")

    for acc in totals:
        bal = acc.balance
        if bal == 0:
            continue
        if acc.account_type == Account.REVENUE:
            revenue_rows.append(account_row(acc, key="amount"))
            revenue += bal
        elif acc.account_id in cogs_ids:
            cogs_rows.append(account_row(acc, key="amount"))
            cogs += bal
        else:
            opex_rows.append(account_row(acc, key="amount"))
            opex += bal

    revenue = _q2(revenue)
    cogs = _q2(cogs)
    opex = _q2(opex)
    gross_profit = _q2(revenue - cogs)
    net_income = _q2(gross_profit - opex)

    return {
        "tenant_id": tenant_id,
        "branch_id": branch_id or None,
        "period": {
            "start_date": start.isoformat() if start else None,
            "end_date": end.isoformat() if end else None,
        },
        "revenue": revenue_rows,
        "cost_of_goods_sold": cogs_rows,
        "operating_expenses": opex_rows,
        "totals": {
            **money_fields("revenue", revenue),
            **money_fields("cost_of_goods_sold", cogs),
            **money_fields("gross_profit", gross_profit),
            **money_fields("operating_expenses", opex),
            **money_fields("expenses", _q2(cogs + opex)),
            **money_fields("net_income", net_income),
        },
    }
