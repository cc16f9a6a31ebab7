# accounting/services/overview_service.py

"""
ACCOUNTING OVERVIEW KPI SERVICE

Ledger-driven KPI aggregation for dashboards.

Contract:
- Returns numeric JSON-safe values (floats for major units + ints for minor units)
- Read-only: no mutations, no postings.
- Balance KPIs (cash, receivables, payables) are "as of" end_date;
  P&L KPIs cover [start_date, end_date].
- All reads run inside one transaction.
"""

from decimal import Decimal

from django.db import transaction
from django.db.models import Count, F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models import Expense, Invoice
from accounting.services import account_resolver as ar
from accounting.services.balance_service import (
    _q2,
    money_fields,
    parse_date,
    posted_totals_by_account,
)
from accounting.services.chart_of_accounts import get_descendant_ids
from accounting.services.exceptions import AccountResolutionError
from accounting.services.income_statement_service import get_income_statement

OPEN_INVOICE_STATUSES = (Invoice.Status.ISSUED, Invoice.Status.PARTIALLY_PAID)


def _ids_for(tenant_id: str, semantics: tuple[str, ...]) -> set[int]:
    ids: set[int] = set()
    for semantic in semantics:
        try:
            account = ar.get_account(tenant_id=tenant_id, semantic=semantic)
        except AccountResolutionError:
            continue
        ids.update(get_descendant_ids(account))
    return ids


@transaction.atomic
def get_accounting_overview_kpis(
    *,
    tenant_id: str,
    start_date=None,
    end_date=None,
    branch_id: str | None = None,
) -> dict:
    end = parse_date(end_date, field="end_date") or timezone.localdate()
    start = parse_date(start_date, field="start_date")

    # -------------------------
    # PROFIT & LOSS (PERIOD)
    # -------------------------
    pnl = get_income_statement(
        tenant_id=tenant_id,
        start_date=start,
        end_date=end,
        branch_id=branch_id,
    )["totals"]

    # -------------------------
    # BALANCES (AS OF end)
    # -------------------------
    balances = {
        acc.account_id: acc.balance
        for acc in posted_totals_by_account(tenant_id=tenant_id, end_date=end, branch_id=branch_id)
    }

    def _sum(ids: set[int]) -> Decimal:
        return _q2(sum((balances.get(i, Decimal("0.00")) for i in ids), Decimal("0.00")))

    cash = _sum(_ids_for(tenant_id, (ar.CASH, ar.BANK)))
    receivables = _sum(_ids_for(tenant_id, (ar.AR,)))
    payables = _sum(_ids_for(tenant_id, (ar.ACCOUNTS_PAYABLE,)))

    # -------------------------
    # SUBLEDGER COUNTS
    # -------------------------
    expense_qs = Expense.objects.filter(tenant_id=tenant_id, status=Expense.Status.PENDING)
    invoice_qs = Invoice.objects.filter(tenant_id=tenant_id).exclude(status=Invoice.Status.VOID)
    if branch_id:
        expense_qs = expense_qs.filter(branch_id=branch_id)
        invoice_qs = invoice_qs.filter(branch_id=branch_id)

    pending = expense_qs.aggregate(
        count=Count("id"),
        total=Coalesce(Sum(F("amount") + F("vat_amount")), Decimal("0.00")),
    )
    outstanding = invoice_qs.filter(status__in=OPEN_INVOICE_STATUSES).aggregate(
        count=Count("id"),
        total=Coalesce(Sum(F("total_amount") - F("amount_paid")), Decimal("0.00")),
    )

    return {
        "tenant_id": tenant_id,
        "branch_id": branch_id or None,
        "period": {
            "start_date": start.isoformat() if start else None,
            "end_date": end.isoformat(),
        },
        "revenue": pnl["revenue"],
        "revenue_minor": pnl["revenue_minor"],
        "expenses": pnl["expenses"],
        "expenses_minor": pnl["expenses_minor"],
        "net_income": pnl["net_income"],
        "net_income_minor": pnl["net_income_minor"],
        **money_fields("cash", cash),
        **money_fields("receivables", receivables),
        **money_fields("payables", payables),
        "pending_expenses": pending["count"],
        **money_fields("pending_expenses_amount", _q2(pending["total"])),
        "invoice_count": invoice_qs.count(),
        "outstanding_invoices": outstanding["count"],
        **money_fields("outstanding_invoices_amount", _q2(outstanding["total"])),
    }
