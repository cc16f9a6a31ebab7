# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET SERVICE

Pure accounting read service.

Responsibilities:
- Compute balances per account as at a given date
- Classify balances into Assets, Liabilities, Equity
- Enforce accounting correctness (Assets = Liabilities + Equity)

Important:
- There is no period closing, so revenue/expense activity is represented
  as "Current Period Earnings" in Equity to keep the balance sheet correct.
- A branch-filtered sheet is a management view: individual entries may
  span branches, so only the unfiltered sheet is required to balance.

Contract:
- API emits numeric JSON values (not strings)
- Provide both major-unit numbers (floats, 2dp) and minor-unit ints (exact)
- Provide liabilities_plus_equity in totals for frontend convenience
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.utils import timezone

from accounting.models import Account
from accounting.services.balance_service import (
    _q2,
    account_row,
    money_fields,
    parse_date,
    posted_totals_by_account,
    to_minor_int,
)
from accounting.services.exceptions import AccountingServiceError

logger = logging.getLogger(__name__)

CURRENT_EARNINGS_NUMBER = "E-CURR"


def generate_balance_sheet(
    *,
    tenant_id: str,
    as_of_date=None,
    branch_id: str | None = None,
) -> dict:
    """
    Args:
        tenant_id: ledger owner
        as_of_date: Optional YYYY-MM-DD (inclusive); defaults to today
        branch_id: Optional branch filter (JournalLine.branch_id)

    Returns:
        {
            "as_of_date": "YYYY-MM-DD",
            "assets": [{"account_number","account_name","balance","balance_minor"}...],
            "liabilities": [...],
            "equity": [...],
            "totals": {"assets", "liabilities", "equity", "liabilities_plus_equity",
                       "*_minor", "balanced"}
        }
    """
    cutoff = parse_date(as_of_date, field="as_of_date") or timezone.localdate()

    totals_by_account = posted_totals_by_account(
        tenant_id=tenant_id,
        end_date=cutoff,
        branch_id=branch_id,
    )

    sections = {"assets": [], "liabilities": [], "equity": []}
    totals = {
        "assets": Decimal("0.00"),
        "liabilities": Decimal("0.00"),
        "equity": Decimal("0.00"),
    }

    revenue_total = Decimal("0.00")
    expense_total = Decimal("0.00")

    for acc in totals_by_account:
        bal = acc.balance
        if bal == 0:
            continue

        if acc.account_type == Account.REVENUE:
            revenue_total += bal
        elif acc.account_type == Account.EXPENSE:
            expense_total += bal
        elif acc.account_type == Account.ASSET:
            sections["assets"].append(account_row(acc))
            totals["assets"] += bal
        elif acc.account_type == Account.LIABILITY:
            sections["liabilities"].append(account_row(acc))
            totals["liabilities"] += bal
        elif acc.account_type == Account.EQUITY:
            sections["equity"].append(account_row(acc))
            totals["equity"] += bal

    current_earnings = _q2(revenue_total - expense_total)
    if current_earnings != 0:
        sections["equity"].append(
            {
                "account_id": None,
                "account_number": CURRENT_EARNINGS_NUMBER,
                "account_name": "Current Period Earnings",
                **money_fields("balance", current_earnings),
            }
        )
        totals["equity"] += current_earnings

    assets_q = _q2(totals["assets"])
    liabilities_plus_equity_q = _q2(totals["liabilities"] + totals["equity"])

    balanced = to_minor_int(assets_q) == to_minor_int(liabilities_plus_equity_q)
    if not balanced and not branch_id:
        logger.error(
            "Balance sheet unbalanced",
            extra={"tenant_id": tenant_id, "assets": str(assets_q), "l_plus_e": str(liabilities_plus_equity_q)},
        )
        raise AccountingServiceError(
            "Balance Sheet is unbalanced "
            f"(Assets={assets_q} Liabilities+Equity={liabilities_plus_equity_q})"
        )

    return {
        "tenant_id": tenant_id,
        "branch_id": branch_id or None,
        "as_of_date": cutoff.isoformat(),
        **sections,
        "totals": {
            **money_fields("assets", assets_q),
            **money_fields("liabilities", totals["liabilities"]),
            **money_fields("equity", totals["equity"]),
            **money_fields("liabilities_plus_equity", liabilities_plus_equity_q),
            "balanced": balanced,
        },
    }
