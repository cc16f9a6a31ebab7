# accounting/api/views/__init__.py

"""
accounting.api.views package

Expose public API views cleanly without making routing/imports fragile.

Important:
- The JournalEntryViewSet is defined in accounting.api.view (singular).
- Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.view import JournalEntryViewSet

from accounting.api.views.trial_balance import TrialBalanceView
from accounting.api.views.balance_sheet import BalanceSheetView
from accounting.api.views.income_statement import IncomeStatementView
from accounting.api.views.overview import AccountingOverviewView

from accounting.api.views.accounts import (
    AccountBalanceView,
    AccountListCreateView,
    AccountTreeView,
    SeedChartView,
)
from accounting.api.views.expenses import (
    ExpenseApproveView,
    ExpenseListCreateView,
    ExpensePayView,
    ExpenseRejectView,
)
from accounting.api.views.invoices import (
    InvoiceDetailView,
    InvoiceIssueView,
    InvoiceListCreateView,
    InvoicePaymentView,
    InvoiceVoidView,
)

__all__ = [
    "JournalEntryViewSet",
    "TrialBalanceView",
    "BalanceSheetView",
    "IncomeStatementView",
    "AccountingOverviewView",
    "AccountListCreateView",
    "AccountTreeView",
    "AccountBalanceView",
    "SeedChartView",
    "ExpenseListCreateView",
    "ExpenseApproveView",
    "ExpensePayView",
    "ExpenseRejectView",
    "InvoiceListCreateView",
    "InvoiceDetailView",
    "InvoiceIssueView",
    "InvoicePaymentView",
    "InvoiceVoidView",
]
